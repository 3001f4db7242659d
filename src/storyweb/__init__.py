"""storyweb: force-directed relationship graph for notes and scenes."""

__version__ = "0.1.0"
