from pydantic import BaseModel, Field
from lending_api.models.user import UserRole

class UserCreate(BaseModel):
    username: str = Field(..., max_length=150)
    password: str
    role: UserRole = UserRole.MEMBER

class UserLogin(BaseModel):
    username: str
    password: str

class UserResponse(BaseModel):
    id: str
    username: str
    role: UserRole

class RegisterResponse(BaseModel):
    message: str
    user: UserResponse

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
