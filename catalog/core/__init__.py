"""Core: error taxonomy and domain types. No IO, no framework imports."""
