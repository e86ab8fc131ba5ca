"""Diff, patch and impact engines for specflow."""
