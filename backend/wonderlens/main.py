from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
from .config import settings, ALLOWED_ORIGINS
from .db import engine
from .models import Base
from .schemas import HealthResponse
from .routes import analyze, kidnews, quiz, scans
from .logger import logger
from .exceptions import (
    WonderLensBaseException,
    wonderlens_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)

app = FastAPI(
    title="WonderLens AI API",
    version="1.0.0",
    description="Kid-safe learning lenses for objects children scan"
)

app.add_exception_handler(WonderLensBaseException, wonderlens_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Quiz-Fallback", "X-Quiz-Category"],
)

@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > settings.MAX_BODY_BYTES:
        logger.warning(
            "Request body too large",
            extra={"path": request.url.path, "content_length": int(content_length)}
        )
        return JSONResponse(
            status_code=413,
            content={"error": "Request body too large", "code": "PAYLOAD_TOO_LARGE"},
        )
    return await call_next(request)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    logger.info(
        f"Request: {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
        }
    )

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"Response: {response.status_code}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
        }
    )

    return response

app.include_router(analyze.router)
app.include_router(kidnews.router)
app.include_router(quiz.router)
app.include_router(scans.router)

@app.on_event("startup")
async def startup():
    logger.info("Starting WonderLens API", extra={"allowed_origins": ALLOWED_ORIGINS})
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

@app.on_event("shutdown")
async def shutdown():
    logger.info("Shutting down WonderLens API")

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

def run() -> None:
    import uvicorn
    uvicorn.run("wonderlens.main:app", host="0.0.0.0", port=settings.PORT)
