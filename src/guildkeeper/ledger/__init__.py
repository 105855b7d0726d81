"""Ledger collaborators: the protocols guildkeeper consumes."""
