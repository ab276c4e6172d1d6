# starquest/schemas/user.py

from pydantic import BaseModel, EmailStr


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    family_name: str | None = None
    locale: str = "en"


class UserResponse(BaseModel):
    id: str
    family_id: str | None
    name: str
    email: EmailStr
    role: str
    locale: str

    model_config = {"from_attributes": True}


class UserLogin(BaseModel):
    email: EmailStr
    password: str
