import uuid
import datetime as dt

from pydantic import BaseModel, ConfigDict

class PresenceIn(BaseModel):
    date: dt.date

class PresenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    date: dt.date
