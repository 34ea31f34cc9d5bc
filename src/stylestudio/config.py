"""Este módulo contiene las variables de configuración de la aplicación."""

import os

GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
DEFAULT_MODEL: str = os.getenv("STYLESTUDIO_DEFAULT_MODEL", "gemini-2.0-flash-exp")
RESPONSE_MODALITIES: list[str] = ["IMAGE", "TEXT"]
DEFAULT_IMAGE_MIME: str = "image/png"

LOG_LEVEL: str = os.getenv("STYLESTUDIO_LOG_LEVEL", "INFO")
SERVER_HOST: str = os.getenv("STYLESTUDIO_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("STYLESTUDIO_PORT", "8000"))
REMOTE_FETCH_TIMEOUT: int = 10  # seconds
