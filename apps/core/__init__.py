"""
Core app for Newskoop.

Shared models, role permissions, error envelope, audit trail, slugs,
storage, real-time events and observability.
"""
