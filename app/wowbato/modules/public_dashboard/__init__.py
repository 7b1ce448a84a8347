"""
Public (unauthenticated) transparency dashboard: read-only aggregates over
projects, users and budget items.
"""
