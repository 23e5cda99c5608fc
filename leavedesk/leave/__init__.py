"""Leave module — request lifecycle, balance ledger, and list queries."""
