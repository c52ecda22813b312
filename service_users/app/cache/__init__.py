"""
Cache package for the Users Service.

Provides a Redis-backed cache holding serialized users with a fixed TTL.
"""
