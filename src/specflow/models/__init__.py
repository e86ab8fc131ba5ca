"""Domain models for specflow."""
