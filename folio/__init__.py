"""Publish résumé data as a hosted personal portfolio site."""

__version__ = "0.1.0"
