"""Internal authentication service consumed by the tasks service."""
