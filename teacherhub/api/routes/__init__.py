"""Route Modules — one file per concern (health, actions, queries, data transfer).

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic (delegate to store, queries, guards)

Design Decisions:
    - Explicit registration in main.create_app over auto-discovery
"""
