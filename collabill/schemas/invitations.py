from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from collabill.models.enums import Role

class InviteIn(BaseModel):
    email: EmailStr
    role: Role = Role.COLLABORATOR

class InvitationOut(BaseModel):
    email: str
    role: Role
    expires_at: datetime

class AcceptInvitationIn(BaseModel):
    token: str = Field(min_length=1)
    name: str = Field(min_length=2, max_length=200)
    password: str = Field(min_length=8, max_length=128)
