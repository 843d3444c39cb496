"""
Infrastructure layer - persistence integrations.

- storage: the key-value store and the JSON blob repository

These wrappers translate between stored formats and our domain models.
"""
