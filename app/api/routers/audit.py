from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_container, require_roles
from app.core.access import Principal
from app.core.rbac import Role
from app.services.container import Container


router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("/events")
def get_recent_events(
    limit: int = Query(default=100, ge=1, le=1000),
    event_type: Optional[str] = None,
    current_user: Principal = Depends(require_roles([Role.ADMIN])),
    container: Container = Depends(get_container),
) -> list[dict]:
    _ = current_user
    return container.event_logger.recent_events(limit=limit, event_type=event_type)
