"""fileindex — filesystem indexing and search service."""

__version__ = "0.1.0"
