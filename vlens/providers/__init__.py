"""Registry-specific package clients."""
