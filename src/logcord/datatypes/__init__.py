"""Shared data types: Discord id wrappers, snapshots, records and capabilities."""
