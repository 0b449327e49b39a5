"""Domain helpers (slug rules, link value types)."""
