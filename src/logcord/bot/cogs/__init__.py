"""
Discord cogs wiring gateway events into the logging pipeline.

- **events_listener.py**: bot lifecycle (on_ready), application command
  errors, and cleanup of routing rows when the bot leaves a guild

- **server_changes_listener.py**: role and channel create/delete/update,
  routed to the ``change`` log channel with audit attribution

- **message_log_listener.py**: message deletions (``text``) and edits
  (``edit``)

- **voice_log_listener.py**: voice joins, leaves, moves and server
  mute/deafen toggles (``voice``)

- **reaction_roles_listener.py**: grants and revokes roles from reactions

- **log_settings_cmds.py**: the ``/log`` command group used to pick the log
  channel of each category
"""
