"""
Version control module
"""

__version__ = "0.4.0"
