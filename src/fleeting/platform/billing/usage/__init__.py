"""Per-tenant resource counters."""
