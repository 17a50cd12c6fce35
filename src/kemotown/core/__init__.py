"""Core configuration for the Kemotown service."""
