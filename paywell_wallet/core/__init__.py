"""Core infrastructure: logging and Redis connections."""
