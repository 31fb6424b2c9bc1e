"""vlens - version suggestions for dependency manifests."""

__version__ = "0.1.0"
