"""Email alert signup and subscription management."""
