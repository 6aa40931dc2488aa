import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import API_TITLE, API_VERSION, get_settings
from database import init_database
from auth import jwt_middleware
from errors import PortalError, ValidationError, error_content
from seed import seed_providers
from routers import (
    appointments_router,
    auth_router,
    prescriptions_router,
    users_router,
    wellness_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Missing JWT secret or token lifetime fails startup here
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    # Initialize database and provision providers before serving
    init_database()
    if settings.seed_providers:
        seed_providers()
    logger.info("%s %s ready", API_TITLE, API_VERSION)
    yield


app = FastAPI(title=API_TITLE, version=API_VERSION, lifespan=lifespan)

# Add middleware
app.middleware("http")(jwt_middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=error_content(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    exc = ValidationError(f"{location}: {message}" if location else message)
    return JSONResponse(status_code=exc.status_code, content=error_content(exc))


# Include routers
app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(appointments_router.router)
app.include_router(prescriptions_router.router)
app.include_router(wellness_router.router)


# Root endpoint
@app.get("/")
def root():
    return {
        "message": "Healthcare Portal API",
        "docs": "/docs",
        "endpoints": {
            "register": "POST /api/auth/register",
            "login": "POST /api/auth/login",
            "verify": "GET /api/auth/verify",
            "doctors": "GET /api/doctors",
            "profile": "GET|PUT /api/users/profile",
            "patients": "GET /api/users/patients",
            "appointments": "GET|POST /api/appointments",
            "appointment": "GET|DELETE /api/appointments/{appointment_id}",
            "prescriptions": "GET|POST /api/prescriptions",
            "my_wellness": "GET|POST /api/wellness/my-wellness",
            "patient_wellness": "GET|POST /api/wellness/patient/{patient_id}",
        },
    }


@app.get("/api/health")
def health_check():
    return {"status": "healthy", "service": "healthcare-portal"}


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=True)
