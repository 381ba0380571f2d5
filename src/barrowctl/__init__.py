"""barrowctl — build and lay out subterranean barrows from Shadax or JSON."""

__version__ = "0.1.0"
