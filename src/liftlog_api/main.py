"""Main FastAPI application."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from liftlog_api.api.routes import FAILURE_BODIES, router
from liftlog_api.config import settings

logger = logging.getLogger(__name__)

app = FastAPI(title="LiftLog API")

# Configure CORS to allow requests from the UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def unreadable_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer 200 with the endpoint's failure body instead of 422."""
    logger.warning(f"Unreadable request to {request.url.path}: {exc.errors()}")
    body = FAILURE_BODIES.get(request.url.path, {"ok": False})
    return JSONResponse({**body, "error": "Invalid request body"})


app.include_router(router)
