"""
Persistence package for the Users Service.

PostgreSQL is the system of record; every read that misses the cache and
every write lands here.
"""
