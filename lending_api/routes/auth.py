from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from lending_api.config import settings
from lending_api.database import get_db
from lending_api.errors import ForbiddenError
from lending_api.models.user import User, UserRole
from lending_api.schemas.auth import UserCreate, UserLogin, UserResponse, RegisterResponse, Token
from lending_api.services.auth import create_user_token, get_current_user
from lending_api.services.identity import IdentityStore

router = APIRouter(tags=["Authentication"])

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user."""
    if user_data.role == UserRole.ADMIN and not settings.allow_admin_signup:
        raise ForbiddenError("Admin accounts cannot be created through registration")

    user = IdentityStore(db).register(user_data.username, user_data.password, user_data.role)
    db.commit()

    return RegisterResponse(
        message="User registered successfully",
        user=UserResponse(**user.to_dict())
    )

@router.post("/login", response_model=Token)
def login(user_data: UserLogin, db: Session = Depends(get_db)):
    """Login and get access token."""
    user = IdentityStore(db).authenticate(user_data.username, user_data.password)

    return Token(
        access_token=create_user_token(user),
        token_type="bearer",
        user=UserResponse(**user.to_dict())
    )

@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user information."""
    return UserResponse(**current_user.to_dict())
