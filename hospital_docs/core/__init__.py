"""Core infrastructure: configuration, logging, database, locking."""
