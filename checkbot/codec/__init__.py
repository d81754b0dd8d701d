"""Compact, URL-safe encodings for checklist locations."""
