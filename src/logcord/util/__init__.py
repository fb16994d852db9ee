"""
Utility helpers for Logcord.

- **logger.py**: logger factory with colored prompt_toolkit console output and
  a per-session log file.
- **io_guard.py**: the shared failure policy for Discord and storage calls
  (``attempt`` / ``IOResult``) and the listener isolation decorator.
"""
