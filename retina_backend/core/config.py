# Standard library imports
import os
from typing import Final, Optional, Tuple


# Hosted inference service; always tried after the configured primary URL
DEFAULT_INFERENCE_URL: Final[str] = "https://fadhlirajwaa-retinascan-api.hf.space"

# Loopback addresses used while running the inference service locally
LOCAL_INFERENCE_URLS: Final[Tuple[str, ...]] = (
    "http://localhost:5001",
    "http://localhost:5000",
    "http://127.0.0.1:5000",
)


class Settings:
    """
    Application settings loaded from environment variables.

    This class centralizes all configuration settings for the application.
    All settings are loaded from environment variables with sensible defaults.
    Values are read once at construction and passed down from there.
    """

    def __init__(self) -> None:
        # Inference Service Configuration
        self.inference_api_url: Final[str] = os.getenv("INFERENCE_API_URL", DEFAULT_INFERENCE_URL)
        # Raw value as set in the environment, None when unset
        self.inference_api_url_env: Final[Optional[str]] = os.getenv("INFERENCE_API_URL")
        self.local_inference_url: Final[str] = os.getenv(
            "LOCAL_INFERENCE_URL",
            LOCAL_INFERENCE_URLS[0]
        )

        # Timeouts (seconds)
        self.probe_timeout: Final[float] = float(os.getenv("INFERENCE_PROBE_TIMEOUT", "20"))
        self.predict_timeout: Final[float] = float(os.getenv("INFERENCE_PREDICT_TIMEOUT", "60"))
        self.local_probe_timeout: Final[float] = float(os.getenv("INFERENCE_LOCAL_PROBE_TIMEOUT", "5"))

        # Retry / cache policy
        self.retry_max_attempts: Final[int] = int(os.getenv("INFERENCE_RETRY_MAX_ATTEMPTS", "3"))
        self.retry_base_delay_ms: Final[int] = int(os.getenv("INFERENCE_RETRY_BASE_DELAY_MS", "1000"))
        self.status_cache_ttl_ms: Final[int] = int(os.getenv("INFERENCE_STATUS_CACHE_TTL_MS", "60000"))

        # Uploads
        self.upload_dir: Final[str] = os.getenv("UPLOAD_DIR", "uploads")
        self.upload_max_mb: Final[int] = int(os.getenv("UPLOAD_MAX_MB", "10"))

        # CORS
        self.cors_origins: Final[Tuple[str, ...]] = tuple(
            origin.strip()
            for origin in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:5173,http://localhost:3000"
            ).split(",")
            if origin.strip()
        )

    @property
    def inference_endpoint_urls(self) -> Tuple[str, ...]:
        """
        Ordered inference-service candidates: primary first, then fixed fallbacks.

        The primary may repeat the hosted default when INFERENCE_API_URL is unset;
        order and count are kept as configured.
        """
        return (self.inference_api_url, DEFAULT_INFERENCE_URL) + LOCAL_INFERENCE_URLS


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton pattern)

    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
