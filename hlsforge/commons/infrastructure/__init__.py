"""Infrastructure providers shared across layers."""
