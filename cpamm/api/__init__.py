"""HTTP API for the pool engine."""
