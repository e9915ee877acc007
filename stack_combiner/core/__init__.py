"""
Core functionality for the Stack Combiner.

This package contains modules for datasets, loading, and element-wise combination.
"""

__all__ = ['dataset', 'combiner', 'parallel', 'image_loader']
