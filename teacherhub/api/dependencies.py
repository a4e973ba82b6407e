"""Route Dependencies — hand the composition root's store to route handlers.

Invariants:
    - The store is created once in main.lifespan and lives on app.state
    - Routes never construct stores or storage themselves

Design Decisions:
    - app.state over a module-level singleton: tests swap the store per client
"""

from fastapi import Request

from teacherhub.services.entity_store import EntityStore


def get_store(request: Request) -> EntityStore:
    """FastAPI dependency for the application's EntityStore."""
    return request.app.state.store
