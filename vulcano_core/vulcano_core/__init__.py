"""
vulcano-core: infrastructure inspection backends.
"""

__version__ = "0.1.0"
