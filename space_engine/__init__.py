"""
Space Engine - availability, pricing and search for a space-reservation marketplace.
"""

__version__ = "0.1.0"
