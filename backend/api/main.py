"""
FastAPI main application.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from core.config import API_V1_PREFIX, CORS_ORIGINS
from core.config_validator import config_validator
from api.routes import sessions

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Readable API",
    description="Article reading and comprehension quiz API",
    version="1.0.0",
)

@app.on_event("startup")
async def validate_configuration():
    """Validate configuration on application startup."""
    logger.info("Validating configuration...")

    validation_result = config_validator.validate_all()

    for warning in validation_result["warnings"]:
        logger.warning(warning)

    if not validation_result["valid"]:
        for error in validation_result["errors"]:
            logger.error(error)
        logger.critical("Application startup aborted due to configuration errors")
        raise SystemExit(1)

    logger.info("Configuration validated successfully")


@app.on_event("shutdown")
async def close_sessions():
    """Stop quiz generation for every open session."""
    for session in list(sessions.sessions.values()):
        session.close()
    sessions.sessions.clear()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sessions.router, prefix=f"{API_V1_PREFIX}/sessions", tags=["sessions"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Readable API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
