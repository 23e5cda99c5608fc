"""Employee directory — read-only name lookup for leave submission."""
