"""FastAPI application setup."""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.errors import PipelineError
from .routes import router

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Investor Research",
    description="Classify domains and LinkedIn profiles as investors and enrich them with deep research",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Errors raised outside a route body, e.g. while building dependencies
@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    logger.warning(f"{request.url.path} failed ({exc.status_code}): {exc.message}")
    return JSONResponse(exc.to_response(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
        status_code=400,
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


# Include API routes
app.include_router(router, prefix="/api")
