"""Services Layer — the imperative shell around the pure core.

Invariants:
    - Services sequence IO around core functions; they hold no business rules
      beyond caller-side precondition checks

Design Decisions:
    - EntityStore owns the latest snapshot; PersistenceAdapter owns the slot format
"""
