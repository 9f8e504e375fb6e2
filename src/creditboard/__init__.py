"""Credit ledger and crediting rules for a course community platform."""
