# =============================================================================
# core/services/task_service.py - Task Business Logic
# =============================================================================

import logging

from sqlalchemy import case, select
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import NotFoundError, ValidationFailedError
from core.models.common import AuditAction, TaskStatus
from core.models.task import TaskCreate, TaskUpdate
from core.services.application_service import ApplicationService
from core.services.audit_service import AuditService
from core.tables import Task
from lib.database import utcnow

logger = logging.getLogger(__name__)

ENTITY = "Task"


class TaskService:
    """Service for follow-up task operations."""

    @staticmethod
    def get_owned(db: Session, user_id: str, task_id: str) -> Task:
        task = db.scalar(
            select(Task).where(Task.id == task_id, Task.user_id == user_id, Task.deleted_at.is_(None))
        )
        if task is None:
            raise NotFoundError("Task")
        return task

    @staticmethod
    def list_tasks(
        db: Session,
        user_id: str,
        application_id: str | None = None,
        status: str | None = None,
    ) -> list[Task]:
        """Open before done, then by due date (undated last), then newest."""
        stmt = select(Task).where(Task.user_id == user_id, Task.deleted_at.is_(None))
        if application_id:
            ApplicationService.get_owned(db, user_id, application_id)
            stmt = stmt.where(Task.application_id == application_id)
        if status:
            stmt = stmt.where(Task.status == status)

        stmt = stmt.order_by(
            case((Task.status == TaskStatus.OPEN.value, 0), else_=1),
            case((Task.due_date.is_(None), 1), else_=0),
            Task.due_date.asc(),
            Task.created_at.desc(),
        )
        return list(db.scalars(stmt).all())

    @staticmethod
    def create_task(
        db: Session,
        user_id: str,
        data: TaskCreate,
        ctx: RequestContext | None = None,
    ) -> Task:
        if data.application_id:
            ApplicationService.get_owned(db, user_id, data.application_id)

        task = Task(user_id=user_id, **data.model_dump())
        db.add(task)
        db.commit()
        db.refresh(task)

        AuditService.record(
            db, user_id, AuditAction.TASK_CREATED,
            entity_type=ENTITY, entity_id=task.application_id or task.id,
            meta={"task_id": task.id, "title": task.title},
            ctx=ctx,
        )
        return task

    @staticmethod
    def update_task(
        db: Session,
        user_id: str,
        task_id: str,
        data: TaskUpdate,
        ctx: RequestContext | None = None,
    ) -> Task:
        task = TaskService.get_owned(db, user_id, task_id)
        changes = data.model_dump(exclude_unset=True)
        for required in ("title", "status"):
            if required in changes and changes[required] is None:
                raise ValidationFailedError("Invalid input", {required: ["Field cannot be empty"]})

        for field, value in changes.items():
            setattr(task, field, value)
        task.updated_at = utcnow()
        db.commit()
        db.refresh(task)

        AuditService.record(
            db, user_id, AuditAction.TASK_UPDATED,
            entity_type=ENTITY, entity_id=task.application_id or task.id,
            meta={"task_id": task.id, "fields": sorted(changes.keys())},
            ctx=ctx,
        )
        return task

    @staticmethod
    def delete_task(db: Session, user_id: str, task_id: str, ctx: RequestContext | None = None) -> None:
        task = TaskService.get_owned(db, user_id, task_id)
        task.soft_delete()
        db.commit()

        AuditService.record(
            db, user_id, AuditAction.TASK_DELETED,
            entity_type=ENTITY, entity_id=task.application_id or task.id,
            meta={"task_id": task.id},
            ctx=ctx,
        )
