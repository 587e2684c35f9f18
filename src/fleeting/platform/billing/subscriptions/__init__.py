"""Subscription lifecycle state machine."""
