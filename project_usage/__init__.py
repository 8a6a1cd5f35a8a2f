"""Report which GitHub projects import a Go package, ranked by popularity."""

__version__ = "1.0.0"
