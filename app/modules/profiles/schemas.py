from pydantic import BaseModel
from typing import Optional


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    description: Optional[str] = None


class ProfileResponse(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True
