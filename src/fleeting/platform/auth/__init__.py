"""JWT authentication."""
