"""Persistence repositories (SQLite, in-memory)."""
