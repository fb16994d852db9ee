"""py-cord integration for Logcord."""
