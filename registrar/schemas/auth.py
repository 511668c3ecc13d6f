# registrar/schemas/auth.py - Login and identity schemas
from pydantic import BaseModel
from uuid import UUID


class LoginIn(BaseModel):
    username: str
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "username": "secretary1",
                "password": "a-long-passphrase"
            }
        }


class UserOut(BaseModel):
    id: UUID
    username: str
    role: str

    class Config:
        from_attributes = True


class LoginOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class TokenUser(BaseModel):
    """Identity carried by a verified access token"""
    id: UUID
    username: str
    role: str
