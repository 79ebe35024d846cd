"""
services/ - Business Logic
==========================
Currency, recurrence, filtering, aggregation, validation and
import/export. Everything except SubscriptionService is pure and
works on in-memory collections.
"""
