"""Adapters: I/O against the outside world (catalog HTTP API, image URLs)."""
