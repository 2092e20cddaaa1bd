"""Document store clients: in-memory, Redis and SQL."""
