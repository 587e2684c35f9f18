"""Plan catalog."""
