"""Task log service gated by the internal auth service."""
