"""Action Dispatch — the single mutation endpoint consumed by the UI.

Invariants:
    - One request = one action = one save
    - Preconditions checked under the store lock, against the snapshot the action
      is applied to
    - Response reports the outcome only; callers query afterwards for data

Design Decisions:
    - One endpoint with a discriminated body over a REST route per action: the
      UI already thinks in actions, and the closed set stays visible in one schema
"""

import logging

from fastapi import APIRouter, Depends

from teacherhub.api.dependencies import get_store
from teacherhub.schemas.actions import DispatchRequest
from teacherhub.services.dispatch_guards import check_action_preconditions
from teacherhub.services.entity_store import EntityStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/actions", tags=["actions"])


@router.post("")
async def dispatch_action(
    body: DispatchRequest, store: EntityStore = Depends(get_store),
):
    """Validate, dispatch and persist one action."""
    action = body.action.to_action()
    result = await store.dispatch(action, guard=check_action_preconditions)
    return {"type": body.action.type, "outcome": result.outcome.value}
