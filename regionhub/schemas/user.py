# regionhub/schemas/user.py
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional

# Roles a visitor may register with; admins are seeded
RegisterRole = Literal["customer", "vendor", "delivery"]

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for user registration requests
class UserCreate(UserBase):
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    role: RegisterRole = "customer"

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    role: str
    name: Optional[str] = None
    phone: Optional[str] = None
    photo: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None

class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Optional[str] = None
