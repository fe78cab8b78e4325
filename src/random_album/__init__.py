"""
Random Album - plays random albums from a local collection, one after another.
"""

__version__ = "0.1.0"
