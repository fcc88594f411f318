# main.py
import logging
import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import STORAGE_BACKEND, UPLOAD_DIR
from app.database import init_db
from app.deps import job_cache
from app.errors import QcError
from app.routers import job_feed_router, job_images_router, jobs_router
from app.utils import error_resp

logger = logging.getLogger("uvicorn.error")

# Initialize database, then load the job cache and keep it on the change feed
init_db()
job_cache.start()

app = FastAPI(title="QC Checklist API", version="1.0.0", description="Quality-control checklist tracker")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers (feed first so /api/jobs/feed is not read as a job id)
app.include_router(job_feed_router.router)
app.include_router(jobs_router.router)
app.include_router(job_images_router.router)

# Serve uploaded images statically when they live on local disk
if STORAGE_BACKEND == "local":
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")


# Exception handlers to return uniform error shape
@app.exception_handler(QcError)
async def qc_exception_handler(request: Request, exc: QcError):
    if exc.status_code >= 500 or exc.status_code == 422:
        logger.warning("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return error_resp(exc.message, exc.status_code, data={"code": exc.code})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    # exc.detail may be dict or str
    msg = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_resp(msg or "Error", exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [{"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()]
    return error_resp("Invalid request", 400, data={"errors": errors})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return error_resp("Internal server error", 500)


@app.get("/")
def root():
    return {"message": "QC Checklist API is running"}


@app.get("/health")
def health_check():
    return {"status": "healthy", "jobs_loaded": not job_cache.is_loading}
