import os
import logging
from typing import Mapping, Optional
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_SECURE_URL = "https://secure.sysdig.com"

class ConfigError(ValueError):
    pass

class AdapterConfig(BaseModel):
    secure_url: str = DEFAULT_SECURE_URL
    secure_api_token: str
    verify_ssl: bool = True
    timeout: float = 30

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "AdapterConfig":
        """Build the configuration from SECURE_* variables. Non-None overrides win."""
        environ = os.environ if environ is None else environ
        values = {
            "secure_url": environ.get("SECURE_URL", DEFAULT_SECURE_URL),
            "secure_api_token": environ.get("SECURE_API_TOKEN"),
            "verify_ssl": environ.get("SECURE_VERIFY_SSL", "true").lower() not in ("0", "false", "no"),
            "timeout": environ.get("SECURE_TIMEOUT", 30),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        if not values["secure_api_token"]:
            raise ConfigError("Secure API token is required. Set SECURE_API_TOKEN or pass --secure-api-token.")
        if not values["verify_ssl"]:
            logger.warning("TLS verification against Secure is disabled")
        return cls(**values)
