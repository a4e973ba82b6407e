"""Infrastructure Layer — durable storage and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from core/ domain logic (errors and protocols excepted)
    - All storage failures mapped to StorageError

Design Decisions:
    - Thin wrappers over SQLAlchemy, one responsibility each
"""
