"""
models/ - Domain Models
=======================
Dataclasses and exceptions shared by every layer.
"""
