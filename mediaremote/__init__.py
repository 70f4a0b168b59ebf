"""Remote control for scriptable macOS media players."""

__version__ = "0.1.0"
