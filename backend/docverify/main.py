import logging
import sqlite3
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docverify.config import settings
from docverify.errors import DocumentError
from docverify.logging_config import configure_logging
from docverify.routers import documents, members

logger = logging.getLogger("docverify")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    # Startup: create or migrate the database, then integrity-check it
    try:
        from docverify.database import init_db
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        init_db(settings.db_path)
        conn = sqlite3.connect(str(settings.db_path))
        result = conn.execute("PRAGMA integrity_check").fetchone()
        conn.close()
        if result and result[0] == "ok":
            logger.info("Database integrity check passed.")
        else:
            logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    except (OSError, sqlite3.Error) as exc:
        logger.error("Could not initialise database at %s: %s", settings.db_path, exc)
    yield


app = FastAPI(
    title="Member Document Verification",
    description="Upload, review and progress tracking of congregation member certificates",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DocumentError)
async def document_error_handler(request: Request, exc: DocumentError) -> JSONResponse:
    if exc.status_code == 403:
        logger.warning("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.code)
    elif exc.status_code == 409:
        logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


app.include_router(documents.router, prefix=settings.api_prefix)
app.include_router(members.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": VERSION}


def run():
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
