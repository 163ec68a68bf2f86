"""HTTP surface of the case intake service."""
