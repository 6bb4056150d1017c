#run it with uvicorn app.main:app --reload
from fastapi import FastAPI
from app.api.api_router import api_router
from app.core.config import get_settings
from dotenv import load_dotenv
import logging

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Load environment variables from .env file
load_dotenv()

app = FastAPI(title="Interest List Backend", version="1.0.0")

# No CORSMiddleware: SubmissionHandler answers preflights and sets CORS headers itself
app.include_router(api_router)


@app.get("/api/health")
def health_check():
    """
    Health check endpoint.

    Reports whether the TwentyCRM key is configured without exposing it.
    """
    settings = get_settings()
    return {
        "status": "ok",
        "env_vars": {
            "twenty_api_key": bool(settings.twenty_api_key),
            "twenty_api_url": settings.crm_config().base_url,
        },
    }
