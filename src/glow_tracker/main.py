from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .exceptions import SnapshotImportError
from .settings import configure_logging, get_settings
from .routers import categories as categories_router
from .routers import preferences as preferences_router
from .routers import snapshot as snapshot_router

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "categories",
        "description": "Per-category habit checklists: add, rename, delete, toggle today, bulk seed.",
    },
    {"name": "snapshot", "description": "Export and import of all categories as one JSON document."},
    {"name": "preferences", "description": "Theme preference."},
]

app = FastAPI(
    title="Daily Glow Tracker",
    description="Backend for per-category daily habit checklists with durable storage and JSON backups.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

_settings = get_settings()
configure_logging(_settings)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global exception handlers for consistent JSON on validation errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": exc.errors(),
        },
    )


@app.exception_handler(SnapshotImportError)
async def import_exception_handler(request: Request, exc: SnapshotImportError) -> JSONResponse:
    """
    Report an unparsable import document. Nothing was changed.

    Response format:
        {"error": "ImportError", "message": "Error importing data. Please check the file format."}
    """
    return JSONResponse(status_code=400, content={"error": "ImportError", "message": str(exc)})


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


# Include routers
app.include_router(categories_router.router)
app.include_router(snapshot_router.router)
app.include_router(preferences_router.router)
