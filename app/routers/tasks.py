# =============================================================================
# app/routers/tasks.py - To-do Task Endpoints
# =============================================================================
# Tasks optionally belong to an application. Open tasks due today feed the
# daily task reminder email.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import ContextDep, DbDep
from core.models.common import ItemList, OkResponse, TaskStatus
from core.models.task import TaskCreate, TaskResponse, TaskUpdate
from core.services.task_service import TaskService
from lib.rate_limiter import rate_limit

router = APIRouter()

TaskId = Annotated[str, Path(description="Task ID")]


@router.get("", response_model=ItemList[TaskResponse])
async def list_tasks(
    db: DbDep,
    application_id: Annotated[str | None, Query(description="Only this application")] = None,
    status: Annotated[TaskStatus | None, Query(description="OPEN or DONE")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """
    List tasks.

    Open tasks come first; within a status, earliest due date first with
    undated tasks last.
    """
    tasks = TaskService.list_tasks(
        db, user.id, application_id=application_id, status=status.value if status else None
    )
    return ItemList[TaskResponse](items=[TaskResponse.model_validate(t) for t in tasks])


@router.post(
    "",
    response_model=TaskResponse,
    status_code=201,
    dependencies=[Depends(rate_limit("tasks:create", 30))],
)
async def create_task(
    body: TaskCreate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    return TaskResponse.model_validate(TaskService.create_task(db, user.id, body, ctx))


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: TaskId,
    body: TaskUpdate,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    return TaskResponse.model_validate(TaskService.update_task(db, user.id, task_id, body, ctx))


@router.delete("/{task_id}", response_model=OkResponse)
async def delete_task(
    task_id: TaskId,
    db: DbDep,
    ctx: ContextDep,
    user: AuthUser = Depends(get_current_user),
):
    TaskService.delete_task(db, user.id, task_id, ctx)
    return OkResponse()
