"""Command line interface for givingbook."""
