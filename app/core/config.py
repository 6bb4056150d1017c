from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional

DEFAULT_TWENTY_API_URL = "https://api.twenty.com/rest"
DEFAULT_NOTE_SOURCE = "Sol Village Website Interest List Form"


class CrmConfig(BaseModel):
    """Everything the CRM client needs, passed in explicitly so handlers never read the environment."""
    api_key: Optional[str] = None
    api_url: str = DEFAULT_TWENTY_API_URL
    timeout: Optional[float] = None  # None means wait forever
    note_source: str = DEFAULT_NOTE_SOURCE

    @property
    def base_url(self) -> str:
        return self.api_url.rstrip("/")


class Settings(BaseSettings):
    # TwentyCRM credentials - the API key must be provided via environment variables
    twenty_api_key: Optional[str] = None
    twenty_api_url: str = DEFAULT_TWENTY_API_URL
    twenty_timeout: Optional[float] = None

    # Attribution line at the bottom of every CRM note
    note_source: str = DEFAULT_NOTE_SOURCE

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def crm_config(self) -> CrmConfig:
        """Build the CRM configuration handed to the submission handler"""
        return CrmConfig(
            api_key=self.twenty_api_key or None,
            api_url=self.twenty_api_url or DEFAULT_TWENTY_API_URL,
            timeout=self.twenty_timeout,
            note_source=self.note_source,
        )


@lru_cache
def get_settings():
    return Settings()
