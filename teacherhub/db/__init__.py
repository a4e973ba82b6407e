"""Database Metadata — SQLAlchemy declarative Base.

Invariants:
    - Every ORM model registers on db.base.Base

Design Decisions:
    - aiosqlite driver by default (local single-user storage); any async SQLAlchemy
      URL works
"""
