"""Backend providers."""
