"""Command line interface for media importer."""
