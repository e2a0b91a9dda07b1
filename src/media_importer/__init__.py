"""Media importer: browse, inspect and copy photos and videos."""

__version__ = "0.1.0"
