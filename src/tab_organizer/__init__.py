"""Sort iTerm2 tabs by name and close duplicate tabs."""

__version__ = "1.0.0"
