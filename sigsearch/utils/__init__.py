"""Shared helpers: error taxonomy and worker pools."""
