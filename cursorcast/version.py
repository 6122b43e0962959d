"""Single source of truth for the CursorCast version string."""

__version__ = "0.3.0"
