"""HTTP API for the Kemotown service."""
