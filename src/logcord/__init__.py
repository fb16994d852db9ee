"""Logcord: a Discord bot that logs server activity to per-category channels."""
