"""
Stack Combiner: add two N-dimensional datasets over their common region.
"""

__version__ = '0.1.0'

__all__ = ['core', 'gui', 'utils']
