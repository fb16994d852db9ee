"""
Configuration management for Logcord.

- **app_configuration.py**: YAML loader for global settings (database path,
  attribution window, reaction-role table). Falls back to defaults on missing
  or malformed files.
- **reaction_roles.py**: the immutable reaction-role registry built from that
  configuration.
"""
