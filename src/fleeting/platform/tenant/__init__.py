"""Tenant records, settings and notifications."""
