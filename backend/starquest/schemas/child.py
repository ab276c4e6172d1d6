from pydantic import BaseModel, EmailStr


class ChildCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    locale: str = "en"
