"""Reaction-role synchronisation."""
