"""
bondex: bonding-curve token exchange with reserve-interest escrow.
"""

__version__ = "0.1.0"
