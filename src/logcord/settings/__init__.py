"""
Routing configuration persistence.

- **log_channels_service.py**: ``get_config`` / ``set_channel`` with per-guild
  serialisation.
- **repositories/**: raw SQL for the log_channels table.
"""
