"""
Database package for Logcord.

- **db_connection.py**: single long-lived aiosqlite connection with a
  serialised write transaction.
- **db_schema.py**: table creation and additive column migrations.
- **database.py**: startup/shutdown coordinator (``database``).
"""
