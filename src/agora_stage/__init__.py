"""Agora Stage: forum visibility and authorization engine."""
