from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional


class GuardianIn(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    profession: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    relation: Optional[str] = Field(None, max_length=50)

    @validator("*", pre=True)
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @validator("email")
    def lower_email(cls, v):
        return v.lower() if v else v


class EmergencyContactIn(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)
    relation: Optional[str] = Field(None, max_length=50)

    @validator("*", pre=True)
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v
