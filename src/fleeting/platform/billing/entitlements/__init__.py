"""Entitlement state, session bundle and write guard."""
