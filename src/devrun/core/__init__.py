"""Dispatch engine: fuzzy matching, errors, and subprocess dispatch."""
