#run it with uvicorn leadintake.main:app --reload
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from leadintake.api.api_router import api_router
from leadintake.core.config import Settings, get_settings
from leadintake.models.lead import HealthReport
import logging

# Load environment variables from .env file
load_dotenv()

settings = get_settings()

# Set up logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Vero's Boutique Lead Intake", version="1.0.0")

# CORS setup, origins come from ALLOWED_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything raised outside the lead endpoint's own handling"""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"ok": False, "error": "server_error"},
    )


@app.get("/api/health", response_model=HealthReport)
def health_check(current: Settings = Depends(get_settings)):
    """
    Health check endpoint.

    Reports only whether configuration is present, never its values.
    """
    env_vars = current.presence()
    env_vars["TO_DEFAULT"] = bool(current.to_default)
    return HealthReport(env_vars=env_vars)
