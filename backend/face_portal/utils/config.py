from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""

    # Upstream face recognition API
    FACE_REC_API_URL: str

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8004
    DEBUG: bool = False
    CORS_ORIGIN: str = "https://identify.mavistech.cloud"

    # HTTPS
    SSL_PRIVATE_KEY_PATH: str = "/path/to/your/privkey.pem"
    SSL_FULLCHAIN_CERT_PATH: str = "/path/to/your/fullchain.pem"

    # Logging
    LOG_DIR: str = "logs"

    # Upstream timeouts (seconds)
    REQUEST_TIMEOUT: float = 30.0
    RECOGNIZE_TIMEOUT: float = 45.0
    DELETE_TIMEOUT: float = 15.0

    @field_validator("FACE_REC_API_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        extra = "ignore"
        case_sensitive = True


# Global settings instance
settings = Settings()
