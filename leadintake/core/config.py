import json
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from functools import lru_cache
from typing import Annotated, Optional, List, Dict

# Env var names the endpoint cannot work without
REQUIRED_ENV_VARS = ("TURNSTILE_SECRET_KEY", "RESEND_API_KEY", "RESEND_FROM_EMAIL")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Turnstile (bot challenge)
    turnstile_secret_key: Optional[str] = None
    turnstile_verify_url: str = "https://challenges.cloudflare.com/turnstile/v0/siteverify"

    # Resend (transactional email)
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com/emails"
    resend_from_email: Optional[str] = None
    resend_from_name: Optional[str] = None

    # Destination mailboxes, one override per form type plus the default
    to_default: Optional[str] = None
    to_early_offer: Optional[str] = None
    to_book_fitting: Optional[str] = None
    to_event_floral: Optional[str] = None
    to_reviews: Optional[str] = None
    to_feedback: Optional[str] = None

    # Seconds allowed for each outbound call
    outbound_timeout: float = 5.0

    success_redirect_url: str = "/?submitted=success"
    unsubscribe_mailto: str = "mailto:unsubscribe@verosboutiqueky.com?subject=unsubscribe"

    # Site identity used in auto-replies
    site_url: str = "https://verosboutiqueky.com"
    site_name: str = "Vero's Boutique"
    site_legal_name: str = "VERO'S BOUTIQUE LLC"
    site_location: str = "100 Saint George St. Richmond, KY 40475"
    site_maps_url: str = "https://maps.google.com/?q=100+Saint+George+St+Richmond+KY+40475"

    # CORS settings
    allowed_origins: Annotated[List[str], NoDecode] = ["*"]
    log_level: str = "info"

    @field_validator("allowed_origins", mode="before")
    def split_origins(cls, value):
        if isinstance(value, str):
            if value.strip().startswith("["):
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    def presence(self) -> Dict[str, bool]:
        """Which required env vars are set (never their values)"""
        return {name: bool(getattr(self, name.lower())) for name in REQUIRED_ENV_VARS}

    def missing_required(self) -> List[str]:
        return [name for name, present in self.presence().items() if not present]


@lru_cache
def get_settings() -> Settings:
    return Settings()
