import os
from dotenv import load_dotenv
from typing import Optional

# Importo il dotenv per la configurazione
load_dotenv()

class Settings:
    # App Setting
    app_name: str = os.getenv("APP_NAME", "Reference Writer")
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    environment: str = os.getenv("ENVIRONMENT", "development")

    # Indirizzi redis e celery per gestione dei task
    redis_url: Optional[str] = os.getenv("REDIS_URL")
    celery_broker_url: str = os.getenv("CELERY_BROKER_URL", "memory://")
    celery_result_backend: str = os.getenv("CELERY_RESULT_BACKEND", "cache+memory://")
    REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")

    # App
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    PORT: int = int(os.getenv("PORT", 8000))
    HOST: str = os.getenv("HOST", "127.0.0.1")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_TO_FILE: str = os.getenv('LOG_TO_FILE', 'false')

    # Latenza simulata della generazione e del controllo AI
    GENERATION_DELAY_SECONDS: float = float(os.getenv("GENERATION_DELAY_SECONDS", 2.0))
    DETECTION_DELAY_SECONDS: float = float(os.getenv("DETECTION_DELAY_SECONDS", 1.5))

    # Limiti sui testi
    MAX_REFERENCE_LENGTH: int = int(os.getenv("MAX_REFERENCE_LENGTH", 5 * 1024 * 1024))
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
    MIN_DETECTION_LENGTH: int = int(os.getenv("MIN_DETECTION_LENGTH", 100))
    MIN_EXPORT_LENGTH: int = int(os.getenv("MIN_EXPORT_LENGTH", 100))
    DEFAULT_CREATIVITY: float = float(os.getenv("DEFAULT_CREATIVITY", 0.7))
    DEFAULT_EXPORT_FILENAME: str = os.getenv("DEFAULT_EXPORT_FILENAME", "generated_content.txt")

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "60/minute")
    RATE_LIMIT_GENERATION: str = os.getenv("RATE_LIMIT_GENERATION", "30/minute")

    cors_origins: str = os.getenv(
        "CORS_ORIGINS",
        f"http://localhost:3000,http://127.0.0.1:3000,{FRONTEND_URL}"
    )

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def redis_configured(self) -> bool:
        """Controlla se Redis è configurato"""
        return bool(self.redis_url)

settings = Settings()
