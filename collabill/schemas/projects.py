import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

class ProjectCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    git_repo: HttpUrl | None = None

class ProjectUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    git_repo: HttpUrl | None = None

class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: str | None
    git_repo: str | None
    created_by: uuid.UUID
    created_at: datetime

class MemberIn(BaseModel):
    user_id: uuid.UUID

class MemberOut(BaseModel):
    project_id: uuid.UUID
    user_id: uuid.UUID
