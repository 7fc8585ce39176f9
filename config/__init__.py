"""Runtime configuration for the checkout runner."""
