"""Core configuration, errors and observability."""
