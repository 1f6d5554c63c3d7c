"""Model-driven content updates for a static portfolio site, committed through GitHub."""

__version__ = "1.0.0"
