import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from app.config import get_settings
from app.core.redis import close_redis
from app.core.sessions import close_session_store, init_session_store
from app.routers import access, auth, categories, upload, videos
from app.services.blob_storage import LOCAL_URL_PREFIX, local_upload_dir
from app.services.chain import close_chain_service

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_session_store()
    try:
        yield
    finally:
        await close_session_store()
        await close_redis()
        close_chain_service()


app = FastAPI(title="Swipe Feed API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(videos.router)
app.include_router(upload.router)
app.include_router(access.router)

# Local blob backend: serve stored videos directly
if not settings.s3_bucket:
    _uploads = local_upload_dir()
    _uploads.mkdir(parents=True, exist_ok=True)
    app.mount(LOCAL_URL_PREFIX, StaticFiles(directory=_uploads), name="uploads")


@app.get("/")
def root():
    return {"message": "Swipe Feed API", "docs": "/docs"}
