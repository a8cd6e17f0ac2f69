import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from collabill.models.enums import TaskSize, TaskStatus

class TaskCreateIn(BaseModel):
    project_id: uuid.UUID
    title: str = Field(min_length=1, max_length=300)
    description: str | None = None
    size: TaskSize
    priority: int | None = None
    due_date: date | None = None
    assigned_to: uuid.UUID | None = None
    status: TaskStatus | None = None
    git_repo: HttpUrl | None = None
    git_branch: str | None = None
    git_pull_request: str | None = None

class TaskUpdateIn(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = None
    size: TaskSize | None = None
    priority: int | None = None
    due_date: date | None = None
    assigned_to: uuid.UUID | None = None
    status: TaskStatus | None = None
    git_repo: HttpUrl | None = None
    git_branch: str | None = None
    git_pull_request: str | None = None

class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str | None
    size: TaskSize
    priority: int | None
    due_date: date | None
    assigned_to: uuid.UUID | None
    status: TaskStatus
    validated_at: datetime | None
    validated_by: uuid.UUID | None
    git_repo: str | None
    git_branch: str | None
    git_pull_request: str | None
    created_at: datetime

class TransitionsOut(BaseModel):
    task_id: uuid.UUID
    status: TaskStatus
    is_project_owner: bool
    allowed: list[TaskStatus]
    can_delete: bool
