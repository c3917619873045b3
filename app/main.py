import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import database
from app.config import settings
from app.logging import ERROR_KIND_HEADER, RequestLoggingMiddleware, init_logging, setup_query_logging
from app.routes import router

logger = logging.getLogger("string_analyzer")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup; the process should not serve without a DB."""
    try:
        database.init_db()
    except Exception:
        logger.critical("Database initialization failed", exc_info=True)
        raise
    yield
    database.engine.dispose()
    logger.info("Database connection pool closed.")


app = FastAPI(
    title="String Analyzer Service",
    version="1.0.0",
    description=(
        "Analyze strings and query the stored collection.\n\n"
        "Features:\n"
        "- Length, palindrome, word count, unique characters and frequency map per string\n"
        "- Content-addressed ids (SHA-256 of the UTF-8 value)\n"
        "- Filtering by query parameters or by short English phrases"
    ),
    lifespan=lifespan,
)

# Initialize logging and middleware
init_logging()
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_query_logging(database.engine)

app.include_router(router)


@app.get("/")
def root():
    return {"message": "String Analyzer API running. Visit /docs for API documentation."}


# -------------------------------
# Unified error response handlers
# -------------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        "HTTPException: %s %s -> %s | detail=%s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    is_post_strings = request.method == "POST" and request.url.path.rstrip("/").endswith("/strings")

    if is_post_strings:
        # Missing required field or invalid JSON -> 400, wrong type -> 422
        bad_request = any(
            err.get("type") in {"missing", "json_invalid"}
            for err in errors
        )
        status = 400 if bad_request else 422
    else:
        status = 400

    logger.warning("ValidationError: %s %s -> %s | errors=%s", request.method, request.url.path, status, errors)
    return JSONResponse(
        status_code=status,
        content={"error": "Validation failed", "details": jsonable_encoder(errors)},
        headers={ERROR_KIND_HEADER: "validation"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
        headers={ERROR_KIND_HEADER: "internal"},
    )


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)
