"""Ambient configuration and logging for strangler."""
