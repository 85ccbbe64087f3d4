import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field

class OrgCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    code: str | None = None
    admin_email: EmailStr
    admin_name: str = Field(min_length=1, max_length=200)

class OrgOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    code: str
    description: str | None
    admin_id: uuid.UUID | None
    is_active: bool

class OrgCodeCheckOut(BaseModel):
    valid: bool
    name: str | None = None
