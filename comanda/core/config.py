"""
Comanda — Configuration
All settings are read from environment variables (or .env file).
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    SERVICE_NAME: str = "comanda-pos"
    SERVICE_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # ── PostgreSQL ────────────────────────────────────────────
    POSTGRES_HOST: str = "pos-db"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "pos_db"
    POSTGRES_USER: str = "pos_user"
    POSTGRES_PASSWORD: str = "pos_pass"
    DATABASE_URL: str | None = None  # full async URL, overrides the POSTGRES_* parts
    DATABASE_POOL_ENABLED: bool = True

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def sync_database_url(self) -> str:
        if self.DATABASE_URL:
            url = make_url(self.DATABASE_URL)
            backend = url.get_backend_name()
            driver = "postgresql" if backend == "postgresql" else backend
            return url.set(drivername=driver).render_as_string(hide_password=False)
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # ── Redis ─────────────────────────────────────────────────
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""

    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # ── Celery ────────────────────────────────────────────────
    CELERY_TASK_ALWAYS_EAGER: bool = False

    @property
    def celery_broker_url(self) -> str:
        return self.redis_url

    @property
    def celery_result_backend(self) -> str:
        return self.redis_url

    # ── JWT (tokens issued by the external identity provider) ─
    JWT_SECRET_KEY: str = "CHANGE_ME_IN_PRODUCTION"
    JWT_ALGORITHM: str = "HS256"

    # ── Idempotency ───────────────────────────────────────────
    IDEMPOTENCY_KEY_TTL_SECONDS: int = 86400

    # ── Kitchen display events ────────────────────────────────
    KITCHEN_EVENTS_CHANNEL: str = "kitchen:events"
    SSE_KEEPALIVE_INTERVAL_SECONDS: int = 15
    SSE_RETRY_MILLISECONDS: int = 3000

    # ── Business / tickets ────────────────────────────────────
    BUSINESS_NAME: str = "SABORES & SAZON"
    BUSINESS_LEGAL_NAME: str = ""
    BUSINESS_TAX_ID: str = ""
    BUSINESS_ADDRESS: str = "Av. Principal 123 - Lima"
    BUSINESS_PHONE: str = "+51 123 456 789"
    CURRENCY_SYMBOL: str = "S/"
    TIMEZONE: str = "America/Lima"
    ORDER_HISTORY_DAYS: int = 30

    # ── Observability ─────────────────────────────────────────
    METRICS_ENABLED: bool = True
    HEALTH_CHECK_TIMEOUT: float = 5.0


@lru_cache()
def get_settings() -> Settings:
    return Settings()
