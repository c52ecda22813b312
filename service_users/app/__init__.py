"""
Users service package.

Exposes CRUD endpoints over the ``users`` table and keeps a Redis copy of
single-user lookups:

- app.main: API surface and service wiring.
- app.store: cache-aside read path and invalidate-on-write path.
- app.cache: Redis-backed cache of serialized users.
- app.persistence: PostgreSQL system of record.

The cache is never authoritative. Any Redis failure degrades to a direct
database read.
"""
