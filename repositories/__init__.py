"""
repositories/ - Data Access Layer
==================================
Async implementations of the SubscriptionRepository contract
(PostgreSQL, local JSON file, TTL cache) plus workspace and share-link
access. Repositories return domain model objects, never raw rows.
"""
