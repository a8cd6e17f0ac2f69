import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from collabill.audit import record_audit
from collabill.auth.deps import get_current_user
from collabill.auth.tokens import now_utc
from collabill.db import get_db
from collabill.models.enums import TaskStatus
from collabill.models.task import Task
from collabill.models.user import User
from collabill.rbac.deps import (
    ProjectContext,
    get_project_context,
    is_project_member,
    load_project_context,
)
from collabill.schemas.tasks import TaskCreateIn, TaskOut, TaskUpdateIn, TransitionsOut
from collabill.workflow import allowed_transitions, can_delete, can_transition

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])

TRANSITION_DENIED = "This task cannot be moved to the selected column with your current permissions"
DELETE_DENIED = "This task cannot be deleted in its current status"
VALIDATED_LOCKED = "Size and assignee of a validated task cannot be changed"

# plain columns a PUT may overwrite, including explicit nulls
_EDITABLE_FIELDS = ("title", "description", "size", "priority", "due_date", "git_branch", "git_pull_request")

def apply_status_change(task: Task, new_status: TaskStatus, user_id: uuid.UUID, now: datetime) -> None:
    """Move ``task`` to ``new_status`` keeping the validation stamp in step.

    The (validated_at, validated_by) pair is set only while the task sits
    in VALIDATED; any move elsewhere clears it.
    """
    task.status = new_status
    if new_status == TaskStatus.VALIDATED:
        task.validated_at = now
        task.validated_by = user_id
    elif task.validated_at is not None or task.validated_by is not None:
        task.validated_at = None
        task.validated_by = None

def _get_task(db: Session, task_id: uuid.UUID, lock: bool = False) -> Task:
    q = select(Task).where(Task.id == task_id)
    if lock:
        # status is decided on this read, so hold the row until commit
        q = q.with_for_update().execution_options(populate_existing=True)
    t = db.scalar(q)
    if t is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return t

def _changes_billing(task: Task, payload: TaskUpdateIn) -> bool:
    fields = payload.model_fields_set
    # a null size is ignored by the update, a null assignee unassigns
    if "size" in fields and payload.size is not None and payload.size != task.size:
        return True
    return "assigned_to" in fields and payload.assigned_to != task.assigned_to

def _check_assignee(db: Session, project_id: uuid.UUID, assignee_id: uuid.UUID | None) -> None:
    if assignee_id is not None and not is_project_member(db, project_id, assignee_id):
        raise HTTPException(status_code=400, detail="assignee is not a project member")

@router.get("/project/{project_id}", response_model=list[TaskOut])
def list_tasks(
    ctx: ProjectContext = Depends(get_project_context),
    db: Session = Depends(get_db),
) -> list[TaskOut]:
    q = (
        select(Task)
        .where(Task.project_id == ctx.project.id)
        .order_by(Task.priority.asc().nulls_last(), Task.created_at.desc())
    )
    rows = db.scalars(q).all()
    return [TaskOut.model_validate(r) for r in rows]

@router.post("", response_model=TaskOut, status_code=201)
def create_task(
    payload: TaskCreateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskOut:
    ctx = load_project_context(db, payload.project_id, user)
    _check_assignee(db, ctx.project.id, payload.assigned_to)

    # a new card starts in TODO; any other column must be reachable from there
    status = payload.status or TaskStatus.TODO
    if not can_transition(TaskStatus.TODO, status, ctx.is_owner):
        raise HTTPException(status_code=403, detail=TRANSITION_DENIED)

    t = Task(
        project_id=ctx.project.id,
        title=payload.title,
        description=payload.description,
        size=payload.size,
        priority=payload.priority,
        due_date=payload.due_date,
        assigned_to=payload.assigned_to,
        status=status,
        git_repo=str(payload.git_repo) if payload.git_repo else None,
        git_branch=payload.git_branch,
        git_pull_request=payload.git_pull_request,
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    return TaskOut.model_validate(t)

@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskOut:
    t = _get_task(db, task_id)
    load_project_context(db, t.project_id, user)
    return TaskOut.model_validate(t)

@router.get("/{task_id}/transitions", response_model=TransitionsOut)
def get_task_transitions(
    task_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TransitionsOut:
    t = _get_task(db, task_id)
    ctx = load_project_context(db, t.project_id, user)

    allowed = allowed_transitions(t.status, ctx.is_owner)
    return TransitionsOut(
        task_id=t.id,
        status=t.status,
        is_project_owner=ctx.is_owner,
        allowed=sorted(allowed, key=lambda s: list(TaskStatus).index(s)),
        can_delete=can_delete(t.status),
    )

@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: uuid.UUID,
    payload: TaskUpdateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskOut:
    t = _get_task(db, task_id, lock=True)
    ctx = load_project_context(db, t.project_id, user)

    fields = payload.model_fields_set

    # a validated task is priced from its size and billed to its assignee
    if t.status == TaskStatus.VALIDATED and _changes_billing(t, payload):
        raise HTTPException(status_code=409, detail=VALIDATED_LOCKED)

    if "assigned_to" in fields:
        _check_assignee(db, t.project_id, payload.assigned_to)

    if payload.status is not None and payload.status != t.status:
        from_status = t.status
        if not can_transition(from_status, payload.status, ctx.is_owner):
            logger.info(
                "task %s: %s -> %s denied for user %s (owner=%s)",
                t.id,
                from_status.value,
                payload.status.value,
                user.id,
                ctx.is_owner,
            )
            raise HTTPException(status_code=403, detail=TRANSITION_DENIED)

        apply_status_change(t, payload.status, user.id, now_utc())
        record_audit(
            db,
            actor_id=user.id,
            action="task.status_changed",
            entity="task",
            entity_id=t.id,
            detail=f"{from_status.value} -> {payload.status.value}",
        )
        logger.info("task %s: %s -> %s by user %s", t.id, from_status.value, payload.status.value, user.id)

    for name in _EDITABLE_FIELDS:
        if name not in fields:
            continue
        value = getattr(payload, name)
        # title and size are required columns
        if value is None and name in ("title", "size"):
            continue
        setattr(t, name, value)

    if "git_repo" in fields:
        t.git_repo = str(payload.git_repo) if payload.git_repo else None

    # allow explicit unassign by sending null
    if "assigned_to" in fields:
        t.assigned_to = payload.assigned_to

    db.add(t)
    db.commit()
    db.refresh(t)
    return TaskOut.model_validate(t)

@router.delete("/{task_id}")
def delete_task(
    task_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    t = _get_task(db, task_id, lock=True)
    load_project_context(db, t.project_id, user)

    if not can_delete(t.status):
        raise HTTPException(status_code=403, detail=DELETE_DENIED)

    record_audit(
        db,
        actor_id=user.id,
        action="task.deleted",
        entity="task",
        entity_id=t.id,
        detail=f"{t.status.value}: {t.title}",
    )
    db.delete(t)
    db.commit()

    logger.info("task %s deleted by user %s", task_id, user.id)
    return {"message": "Task deleted"}
