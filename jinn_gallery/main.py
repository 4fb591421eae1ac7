import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.middleware.sessions import SessionMiddleware
from .core.config import settings
from .core.errors import GalleryError
from .routers.auth import router as auth_router
from .routers.gallery import router as gallery_router
from .services.image import ensure_directory

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "gallery",
        "description": (
            "Upload images and read back their AI-written descriptions.\n\n"
            "- Upload via multipart (JPEG/PNG/GIF, max 10 MB).\n"
            "- Images are resized to fit 2000x2000 and get a 200x200 thumbnail.\n"
            "- List all items or one user's items, newest first."
        ),
    },
    {
        "name": "auth",
        "description": "Register, log in and out. The session cookie authorizes uploads.",
    },
]

app = FastAPI(
    title="Jinn Gallery",
    description=(
        "How to Use:\n\n"
        "1) Register with POST /api/register or log in with POST /api/login.\n"
        "2) Upload an image: POST /api/gallery/upload with `image`, `creativityValue`, "
        "`excitementValue` and `jinnification`.\n"
        "3) List images: GET /api/gallery, optionally with `userId`.\n"
        "4) Fetch one: GET /api/gallery/{id}. Image files are served under /uploads."
    ),
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age,
)


@app.exception_handler(GalleryError)
async def gallery_error_handler(request: Request, exc: GalleryError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        loc = ".".join(str(p) for p in errors[0].get("loc", ()) if p != "body")
        message = f"{loc}: {errors[0].get('msg')}" if loc else str(errors[0].get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


@app.get("/api/health")
def health():
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(gallery_router)

ensure_directory(settings.gallery_dir)
ensure_directory(settings.thumbnails_dir)
app.mount("/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads")
