import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from collabill.audit import record_audit
from collabill.auth.deps import get_current_user
from collabill.db import get_db
from collabill.models.project import Project, ProjectMember
from collabill.models.task import Task
from collabill.models.user import User
from collabill.rbac.deps import ProjectContext, get_project_context, require_project_owner
from collabill.schemas.projects import (
    MemberIn,
    MemberOut,
    ProjectCreateIn,
    ProjectOut,
    ProjectUpdateIn,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])

@router.post("", response_model=ProjectOut, status_code=201)
def create_project(
    payload: ProjectCreateIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProjectOut:
    p = Project(
        name=payload.name,
        description=payload.description,
        git_repo=str(payload.git_repo) if payload.git_repo else None,
        created_by=user.id,
    )
    db.add(p)
    db.flush()

    db.add(ProjectMember(project_id=p.id, user_id=user.id))
    db.commit()
    db.refresh(p)
    return ProjectOut.model_validate(p)

@router.get("", response_model=list[ProjectOut])
def list_projects(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ProjectOut]:
    q = (
        select(Project)
        .join(ProjectMember, ProjectMember.project_id == Project.id)
        .where(ProjectMember.user_id == user.id)
        .order_by(Project.created_at.desc())
    )
    rows = db.scalars(q).all()
    return [ProjectOut.model_validate(r) for r in rows]

@router.get("/{project_id}", response_model=ProjectOut)
def get_project(ctx: ProjectContext = Depends(get_project_context)) -> ProjectOut:
    return ProjectOut.model_validate(ctx.project)

@router.put("/{project_id}", response_model=ProjectOut)
def update_project(
    payload: ProjectUpdateIn,
    ctx: ProjectContext = Depends(get_project_context),
    db: Session = Depends(get_db),
) -> ProjectOut:
    p = ctx.project
    if payload.name is not None:
        p.name = payload.name
    if "description" in payload.model_fields_set:
        p.description = payload.description
    if "git_repo" in payload.model_fields_set:
        p.git_repo = str(payload.git_repo) if payload.git_repo else None

    db.add(p)
    db.commit()
    db.refresh(p)
    return ProjectOut.model_validate(p)

@router.delete("/{project_id}")
def delete_project(
    ctx: ProjectContext = Depends(require_project_owner),
    db: Session = Depends(get_db),
) -> dict:
    project_id = ctx.project.id

    db.execute(delete(Task).where(Task.project_id == project_id))
    db.execute(delete(ProjectMember).where(ProjectMember.project_id == project_id))
    db.delete(ctx.project)
    record_audit(db, actor_id=ctx.user.id, action="project.deleted", entity="project", entity_id=project_id)
    db.commit()

    logger.info("project %s deleted by %s", project_id, ctx.user.id)
    return {"message": "Project deleted successfully"}

@router.get("/{project_id}/members", response_model=list[MemberOut])
def list_members(
    ctx: ProjectContext = Depends(get_project_context),
    db: Session = Depends(get_db),
) -> list[MemberOut]:
    rows = db.scalars(
        select(ProjectMember)
        .where(ProjectMember.project_id == ctx.project.id)
        .order_by(ProjectMember.created_at.asc())
    ).all()
    return [MemberOut(project_id=m.project_id, user_id=m.user_id) for m in rows]

@router.post("/{project_id}/members", response_model=MemberOut, status_code=201)
def add_member(
    payload: MemberIn,
    ctx: ProjectContext = Depends(require_project_owner),
    db: Session = Depends(get_db),
) -> MemberOut:
    if db.get(User, payload.user_id) is None:
        raise HTTPException(status_code=404, detail="user not found")

    existing = db.get(ProjectMember, {"project_id": ctx.project.id, "user_id": payload.user_id})
    if existing is not None:
        return MemberOut(project_id=existing.project_id, user_id=existing.user_id)

    m = ProjectMember(project_id=ctx.project.id, user_id=payload.user_id)
    db.add(m)
    db.commit()
    return MemberOut(project_id=m.project_id, user_id=m.user_id)

@router.delete("/{project_id}/members/{user_id}")
def remove_member(
    user_id: uuid.UUID,
    ctx: ProjectContext = Depends(require_project_owner),
    db: Session = Depends(get_db),
) -> dict:
    if user_id == ctx.project.created_by:
        raise HTTPException(status_code=400, detail="the project creator cannot be removed")

    m = db.get(ProjectMember, {"project_id": ctx.project.id, "user_id": user_id})
    if m is None:
        raise HTTPException(status_code=404, detail="member not found")

    db.delete(m)
    db.commit()
    return {"deleted": True}
