"""
Core business logic for the coaching practice.

This module is framework-agnostic - it doesn't import pydantic, touch the
file system, or know how state is stored. That separation means the
pricing and analytics rules can be tested in isolation with plain objects.
"""
