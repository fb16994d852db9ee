"""Presentation helpers: turning diffs into change records and embeds."""
