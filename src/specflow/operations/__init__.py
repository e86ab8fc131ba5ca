"""History operations for specflow."""
