import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from collabill.auth.passwords import hash_password
from collabill.auth.tokens import now_utc
from collabill.db import SessionLocal
from collabill.models.enums import Role, TaskSize, TaskStatus
from collabill.models.presence import Presence
from collabill.models.project import Project, ProjectMember
from collabill.models.task import Task
from collabill.models.user import CollaboratorRate, User, UserRole

SEED_PASSWORD = "collabill-dev-password"

@dataclass
class SeedResult:
    owner_email: str
    collaborator_email: str
    password: str
    project_id: uuid.UUID
    task_ids: list[uuid.UUID]

def get_or_create_user(db: Session, email: str, name: str, role: Role) -> User:
    email = email.lower().strip()
    u = db.scalar(select(User).where(User.email == email))
    if u is None:
        u = User(email=email, name=name, password_hash=hash_password(SEED_PASSWORD))
        db.add(u)
        db.flush()
    if db.get(UserRole, {"user_id": u.id, "role": role}) is None:
        db.add(UserRole(user_id=u.id, role=role))
        db.flush()
    return u

def get_or_create_rates(db: Session, user_id: uuid.UUID) -> CollaboratorRate:
    r = db.get(CollaboratorRate, user_id)
    if r is None:
        r = CollaboratorRate(
            user_id=user_id,
            daily_rate=Decimal("400.00"),
            rate_xs=Decimal("50.00"),
            rate_s=Decimal("120.00"),
            rate_m=Decimal("300.00"),
            rate_l=Decimal("650.00"),
        )
        db.add(r)
        db.flush()
    return r

def get_or_create_project(db: Session, name: str, created_by: uuid.UUID, members: list[uuid.UUID]) -> Project:
    p = db.scalar(select(Project).where(Project.name == name, Project.created_by == created_by))
    if p is None:
        p = Project(name=name, description="seeded project", created_by=created_by)
        db.add(p)
        db.flush()
    for user_id in members:
        if db.get(ProjectMember, {"project_id": p.id, "user_id": user_id}) is None:
            db.add(ProjectMember(project_id=p.id, user_id=user_id))
    db.flush()
    return p

def get_or_create_task(
    db: Session,
    project: Project,
    title: str,
    size: TaskSize,
    status: TaskStatus,
    assigned_to: uuid.UUID | None,
) -> Task:
    t = db.scalar(select(Task).where(Task.project_id == project.id, Task.title == title))
    if t is None:
        t = Task(project_id=project.id, title=title, size=size, assigned_to=assigned_to, status=status)
        if status == TaskStatus.VALIDATED:
            t.validated_at = now_utc()
            t.validated_by = project.created_by
        db.add(t)
        db.flush()
    return t

def seed_presences(db: Session, user_id: uuid.UUID, days: int = 5) -> None:
    today = date.today()
    for i in range(days):
        d = today - timedelta(days=i)
        exists = db.scalar(select(Presence.id).where(Presence.user_id == user_id, Presence.date == d))
        if exists is None:
            db.add(Presence(user_id=user_id, date=d))
    db.flush()

def seed() -> SeedResult:
    db = SessionLocal()
    try:
        owner = get_or_create_user(db, "owner@example.com", "Olivia Owner", Role.OWNER)
        collaborator = get_or_create_user(db, "collaborator@example.com", "Carl Collaborator", Role.COLLABORATOR)
        get_or_create_rates(db, collaborator.id)

        project = get_or_create_project(db, "seeded project", owner.id, [owner.id, collaborator.id])

        tasks = [
            get_or_create_task(db, project, "write onboarding doc", TaskSize.S, TaskStatus.TODO, collaborator.id),
            get_or_create_task(db, project, "wire invoices page", TaskSize.M, TaskStatus.IN_PROGRESS, collaborator.id),
            get_or_create_task(db, project, "review rate card", TaskSize.XS, TaskStatus.IN_REVIEW, collaborator.id),
            get_or_create_task(db, project, "ship kanban board", TaskSize.L, TaskStatus.VALIDATED, collaborator.id),
        ]
        seed_presences(db, collaborator.id)

        db.commit()

        return SeedResult(
            owner_email=owner.email,
            collaborator_email=collaborator.email,
            password=SEED_PASSWORD,
            project_id=project.id,
            task_ids=[t.id for t in tasks],
        )
    finally:
        db.close()

if __name__ == "__main__":
    r = seed()
    print("seed complete")
    print(f"project_id={r.project_id}")
    print(f"tasks={len(r.task_ids)}")
    print("users:")
    print(f"  owner:        {r.owner_email}")
    print(f"  collaborator: {r.collaborator_email}")
    print(f"  password:     {r.password}")
