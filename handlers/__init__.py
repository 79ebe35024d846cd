"""
handlers/ - Presentation Layer
================================
Telegram command handlers. One workspace per chat: each handler resolves
the chat's repository, calls a service, and formats the reply.
Domain errors become user-facing messages here; nothing else is decided here.
"""
