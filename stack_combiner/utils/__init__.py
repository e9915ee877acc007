"""
Utility functions for the Stack Combiner.

This package contains helper modules for logging, configuration, and other
general purpose functionality used across the application.
"""

__all__ = ['logger', 'config', 'helpers']
