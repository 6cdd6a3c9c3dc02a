import logging
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import app_settings
from src.core.logging_config import setup_logging
from src.routers import assessment as assessment_router

# Configure logging VERY early
setup_logging(app_settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="AI Maturity Assessment - Analytics API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # The quiz is embedded on several landing sites
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include Routers ---
app.include_router(assessment_router.router, prefix="/api/v1", tags=["assessment"])


@app.get("/", tags=["Health Check"])
async def read_root():
    """
    Root endpoint for basic health check.
    """
    return {
        "status": "ok",
        "message": "AI Maturity Assessment analytics is running.",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn
    # Better to run with `uvicorn main:app --reload` from the project root directory
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
