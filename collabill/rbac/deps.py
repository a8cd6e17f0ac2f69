import uuid

from fastapi import Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from collabill.auth.deps import get_current_user
from collabill.db import get_db
from collabill.models.enums import Role
from collabill.models.project import Project, ProjectMember
from collabill.models.user import User, UserRole
from collabill.rbac.perms import PERMS

class ProjectContext:
    def __init__(self, project: Project, user: User):
        self.project = project
        self.user = user

    @property
    def is_owner(self) -> bool:
        return self.project.created_by == self.user.id

def get_user_roles(db: Session, user_id: uuid.UUID) -> set[Role]:
    return set(db.scalars(select(UserRole.role).where(UserRole.user_id == user_id)).all())

def has_perm(db: Session, user: User, action: str) -> bool:
    allowed = PERMS.get(action)
    if allowed is None:
        raise RuntimeError(f"unknown permission action: {action}")
    return bool(get_user_roles(db, user.id) & allowed)

def require_perm(action: str):
    if action not in PERMS:
        raise RuntimeError(f"unknown permission action: {action}")

    def _checker(
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> User:
        if not has_perm(db, user, action):
            raise HTTPException(status_code=403, detail="forbidden")
        return user

    return _checker

def is_project_member(db: Session, project_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    return db.get(ProjectMember, {"project_id": project_id, "user_id": user_id}) is not None

def load_project_context(db: Session, project_id: uuid.UUID, user: User) -> ProjectContext:
    project = db.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail="project not found")

    if not is_project_member(db, project_id, user.id):
        raise HTTPException(status_code=403, detail="not a member of this project")

    return ProjectContext(project=project, user=user)

def get_project_context(
    project_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProjectContext:
    return load_project_context(db, project_id, user)

def require_project_owner(ctx: ProjectContext = Depends(get_project_context)) -> ProjectContext:
    if not ctx.is_owner:
        raise HTTPException(status_code=403, detail="only the project creator can do this")
    return ctx
