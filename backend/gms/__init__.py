"""GMS shop-floor service: offline action queue and backend reconciliation."""
