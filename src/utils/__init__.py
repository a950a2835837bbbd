"""
Utility functions for the physio coach project.
"""

from .io_utils import load_config

__all__ = [
    'load_config',
]
