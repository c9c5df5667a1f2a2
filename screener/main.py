# screener/main.py

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .logging_config import setup_logging
from .routers import account, health, organization
from .services.account_deletion import DeletionError

setup_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Resume Screener API",
    description="Privileged account and organization endpoints for the resume screener.",
    version="0.1.0",
)

# --- CORS Middleware Configuration ---
origins = [
    settings.FRONTEND_BASE_URL,
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error rendering ---
@app.exception_handler(DeletionError)
async def deletion_error_handler(request: Request, exc: DeletionError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Same {"error": ...} body as the deletion errors, instead of FastAPI's {"detail": ...}.
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


# --- API Routers ---
app.include_router(health.router)
app.include_router(account.router)
app.include_router(organization.router)
