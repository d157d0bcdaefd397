"""Core module - configuration, error taxonomy and rate limiting."""
