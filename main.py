# main.py
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from config import get_settings
from database import close_mongo_connection, create_indexes, get_database
from dependencies import require_admin
from exceptions import AppError
from models.user import User
from routers import auth, certificates, courses, enrollments, payments, quizzes
from schemas.common import DataResponse
from utils.log import bind_context, configure_logging, reset_context
from utils.sample_data import populate_sample_data

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging(settings.log_level, settings.log_format)
    logger.info("Starting %s API (%s)", settings.platform_name, settings.environment)
    try:
        await create_indexes()
    except PyMongoError as e:
        logger.warning("Could not ensure indexes at startup: %s", e)
    yield
    # Shutdown
    await close_mongo_connection()


app = FastAPI(
    title=f"{settings.platform_name} API",
    version="1.0.0",
    description="Course marketplace: catalog, checkout, enrollments, quizzes and certificates",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = bind_context(request_id=request_id, method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
    finally:
        reset_context(token)
    response.headers["X-Request-ID"] = request_id
    return response


def _error(status_code: int, message: str, code: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "code": code},
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message, exc.code)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    code = "not_authorized" if exc.status_code == 401 else "http_error"
    return _error(exc.status_code, str(exc.detail), code, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return _error(400, message, "validation_error")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Server error", "internal_error")


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(courses.router, prefix=settings.api_prefix)
app.include_router(enrollments.router, prefix=settings.api_prefix)
app.include_router(payments.router, prefix=settings.api_prefix)
app.include_router(quizzes.router, prefix=settings.api_prefix)
app.include_router(certificates.router, prefix=settings.api_prefix)


@app.get(f"{settings.api_prefix}/health")
async def health_check():
    return {"success": True, "status": "healthy", "service": settings.platform_name}


@app.post(f"{settings.api_prefix}/populate-sample-data", response_model=DataResponse[dict])
async def populate_sample(
    current_user: User = Depends(require_admin),
    db=Depends(get_database),
):
    """Seed demo courses and quizzes - admin only"""
    result = await populate_sample_data(db)
    return DataResponse(message="Sample data populated", data=result)
