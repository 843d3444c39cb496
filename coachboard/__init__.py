"""
CoachBoard - business dashboard for a solo coaching practice.

This package contains the complete application:
- core: Framework-agnostic business logic (pricing, analytics, bookings)
- infrastructure: The key-value store and JSON blob persistence
- config: Application configuration
"""

__version__ = "0.1.0"
