# routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from crud.user import UserCRUD
from database import get_database
from dependencies import get_current_user
from models.user import User
from schemas.common import DataResponse
from schemas.user import AuthResponse, UserCreate, UserOut
from utils.security import create_access_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def get_user_crud(db=Depends(get_database)) -> UserCRUD:
    return UserCRUD(db)


def _auth_response(user: User) -> AuthResponse:
    access_token = create_access_token(data={"sub": user.email, "role": user.role})
    return AuthResponse(access_token=access_token, user=UserOut(**user.model_dump(by_alias=True)))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, crud: UserCRUD = Depends(get_user_crud)):
    """Self-service signup. Accounts are students, except the very first one."""
    if await crud.get_user_by_email(user_data.email) or await crud.get_user_by_username(user_data.username):
        raise HTTPException(status_code=400, detail="Email or username already registered")
    user = await crud.create_user(user_data)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    crud: UserCRUD = Depends(get_user_crud)
):
    identifier = form_data.username.strip()
    user = await crud.get_user_by_identifier(identifier)
    if not user or not verify_password(form_data.password, user.password_hash):
        logger.info("Failed login for %s", identifier)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Your account is deactivated. Contact admin."
        )

    await crud.update_last_login(user.id)
    return _auth_response(user)


@router.get("/profile", response_model=DataResponse[UserOut])
async def get_profile(current_user: User = Depends(get_current_user)):
    return DataResponse(data=UserOut(**current_user.model_dump(by_alias=True)))
