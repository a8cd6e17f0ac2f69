from collabill.models.audit import AuditLog
from collabill.models.invoice import Invoice, InvoiceLine
from collabill.models.presence import Presence
from collabill.models.project import Project, ProjectMember
from collabill.models.task import Task
from collabill.models.tokens import Invitation, PasswordResetToken
from collabill.models.user import CollaboratorRate, User, UserRole

__all__ = [
    "User",
    "UserRole",
    "CollaboratorRate",
    "Project",
    "ProjectMember",
    "Task",
    "Invitation",
    "PasswordResetToken",
    "Presence",
    "Invoice",
    "InvoiceLine",
    "AuditLog",
]
