"""
GUI components for the Stack Combiner.

This package contains the file dialog and display window helpers.
"""

__all__ = ['display']
