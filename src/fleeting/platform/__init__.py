"""
Fleeting Platform Services - subscription entitlements for multi-tenant storefronts.
"""

__version__ = "1.0.0"
