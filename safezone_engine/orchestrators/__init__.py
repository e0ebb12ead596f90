"""Sync-job orchestration: wires configuration, land masks and clipping
into one catalog document per city."""
