# backend/main.py
import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from database import init_db
from schemas.common import ErrorResponse
from utils.errors import ApiError, InternalError

# Routers
from routes.auth import router as auth_router
from routes.patients import router as patients_router
from routes.doctors import router as doctors_router
from routes.mappings import router as mappings_router
from routes.admin import router as admin_router
from routes.logs import router as logs_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialization
init_db()

app = FastAPI(title="Healthcare Directory API", version="1.0.0")

# CORS Configuration
origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error envelope: {success: false, message, code, error?} ---

def _error_response(status_code: int, message: str, code: str, detail=None, errors=None) -> JSONResponse:
    body = ErrorResponse(message=message, code=code, errors=errors)
    # Internal details never leave the server in production
    if detail is not None and not settings.is_production:
        body.error = str(detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, exclude_none=True))


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return _error_response(exc.status_code, exc.message, exc.code, detail=exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = exc.errors()
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": err.get("msg", "")}
        for err in problems
    ]
    if problems and all(err.get("type") == "missing" for err in problems):
        fields = ", ".join(e["field"] for e in errors)
        return _error_response(400, f"Missing required fields: {fields}", "MissingRequiredField", errors=errors)
    return _error_response(400, "Invalid request data", "ValidationError", errors=errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error_response(404, "Route not found", "NotFound")
    return _error_response(exc.status_code, str(exc.detail), "HTTPError")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return await api_error_handler(request, InternalError(detail=exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await api_error_handler(request, InternalError(detail=exc))


# Register routers
app.include_router(auth_router)
app.include_router(patients_router)
app.include_router(doctors_router)
app.include_router(mappings_router)
app.include_router(admin_router)
app.include_router(logs_router)


@app.get("/")
def read_root():
    return {"success": True, "message": "Welcome to Healthcare API"}


@app.get("/api/health")
def health_check():
    return {"success": True, "status": "healthy"}
