# dependencies.py
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from config import get_settings
from crud.user import UserCRUD
from database import get_database
from exceptions import AuthorizationError
from models.user import RoleEnum, User
from services.catalog import CatalogService
from services.certificate import CertificateService
from services.enrollment import EnrollmentService
from services.payment import PaymentGateway, get_payment_gateway
from services.quiz import QuizService
from utils.log import bind_context
from utils.security import verify_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{get_settings().api_prefix.lstrip('/')}/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db=Depends(get_database)
) -> User:
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = verify_token(token)
    if not payload or payload.get("sub") is None:
        raise credentials_error

    user = await UserCRUD(db).get_user_by_email(payload["sub"])
    if user is None or not user.is_active:
        raise credentials_error
    bind_context(user_id=user.id)
    return user


async def require_instructor_or_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role not in (RoleEnum.admin.value, RoleEnum.instructor.value):
        raise AuthorizationError("Instructor or admin privileges required")
    return current_user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != RoleEnum.admin.value:
        raise AuthorizationError("Admin privileges required")
    return current_user


def get_catalog_service(db=Depends(get_database)) -> CatalogService:
    return CatalogService(db)


def get_enrollment_service(
    db=Depends(get_database),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> EnrollmentService:
    return EnrollmentService(db, gateway)


def get_quiz_service(db=Depends(get_database)) -> QuizService:
    return QuizService(db)


def get_certificate_service(db=Depends(get_database)) -> CertificateService:
    return CertificateService(db)
