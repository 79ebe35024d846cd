"""
db/ - Database Layer
====================
PostgreSQL connection pool, schema initialization, and the helpers
that run one statement off the event loop.
"""
