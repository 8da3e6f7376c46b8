from fastapi import APIRouter, Depends, Query

from taskify.analytics import build_report
from taskify.api.deps import get_workspace
from taskify.models.analytics import AnalyticsReport
from taskify.workspace import Workspace

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsReport)
def analytics(
    days: int = Query(default=7, ge=1, le=90),
    ws: Workspace = Depends(get_workspace),
) -> AnalyticsReport:
    return AnalyticsReport(**build_report(ws.tasks.list_tasks(), days=days))
