from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from taskify.api.deps import get_workspace
from taskify.models.tasks import STATUS_PATTERN, TaskCreate, TaskOut, TaskStatsOut, TaskUpdate
from taskify.workspace import Workspace

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskOut])
def list_tasks(
    status_filter: str | None = Query(default=None, alias="status", pattern=STATUS_PATTERN),
    category: str | None = Query(default=None, max_length=100),
    ws: Workspace = Depends(get_workspace),
) -> list[TaskOut]:
    tasks = ws.tasks.list_tasks(status=status_filter, category=category)
    return [TaskOut(**t.to_dict()) for t in tasks]


@router.post("", response_model=TaskOut, status_code=201)
def create_task(payload: TaskCreate, ws: Workspace = Depends(get_workspace)) -> TaskOut:
    try:
        task = ws.tasks.create_task(**payload.model_dump(mode="json"))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return TaskOut(**task.to_dict())


@router.get("/stats", response_model=TaskStatsOut)
def task_stats(ws: Workspace = Depends(get_workspace)) -> TaskStatsOut:
    return TaskStatsOut(**ws.tasks.task_stats().to_dict())


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: UUID, ws: Workspace = Depends(get_workspace)) -> TaskOut:
    task = ws.tasks.get_task(str(task_id))
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskOut(**task.to_dict())


@router.put("/{task_id}", response_model=TaskOut)
def update_task(task_id: UUID, payload: TaskUpdate, ws: Workspace = Depends(get_workspace)) -> TaskOut:
    changes = payload.model_dump(mode="json", exclude_unset=True)
    try:
        updated = ws.tasks.update_task(str(task_id), changes)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if updated is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskOut(**updated.to_dict())


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: UUID, ws: Workspace = Depends(get_workspace)) -> None:
    if not ws.tasks.delete_task(str(task_id)):
        raise HTTPException(status_code=404, detail="Task not found")
    return None
