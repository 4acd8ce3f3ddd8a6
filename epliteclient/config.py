from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from epliteclient.connection import DEFAULT_API_VERSION, DEFAULT_ENCODING
from epliteclient.transport import DEFAULT_TIMEOUT


class Settings(BaseSettings):
    # Core Settings
    url: str = Field("http://localhost:9001", description="Etherpad Lite base URL, including protocol")
    api_key: str = Field("", description="Etherpad Lite API key (APIKEY.txt)")
    api_version: str = Field(DEFAULT_API_VERSION, description="API version used in request paths")
    encoding: str = Field(DEFAULT_ENCODING, description="Character encoding for POST bodies")

    # HTTP Settings
    timeout: float | None = Field(DEFAULT_TIMEOUT, description="Request timeout in seconds (empty for none)")
    verify_ssl: bool = Field(True, description="Validate TLS certificates")

    # Logging Settings
    log_level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(False, description="Emit JSON log lines")

    model_config = SettingsConfigDict(env_file=".env", env_prefix="ETHERPAD_", extra="ignore")

    def validate_api_key(self) -> None:
        """Validate that API key is provided"""
        if not self.api_key:
            raise ValueError("ETHERPAD_API_KEY is required. Set it via environment variable or .env file.")
