"""Persistence layer for specflow history state."""
