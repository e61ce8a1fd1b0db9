"""Database Base — the declarative base shared by models/ and alembic/env.py.

Engine and session lifecycle live in infrastructure/database.py.
"""
