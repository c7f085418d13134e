from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # App
    APP_NAME: str = "ClubSphere API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./clubsphere.db"

    # Identity tokens: shared secret with the identity provider
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Comma-separated emails promoted to admin on their first login
    ADMIN_EMAILS: str = ""

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    CURRENCY: str = "usd"

    # AWS S3 (club/event images)
    AWS_ACCESS_KEY_ID:     str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_BUCKET_NAME:       str = ""
    AWS_REGION:            str = "us-east-1"

    # Resend
    RESEND_API_KEY: str = ""
    MAIL_FROM: str = "ClubSphere <no-reply@clubsphere.app>"

    # Sentry
    SENTRY_DSN: str = ""

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # CORS + Checkout redirects
    CLIENT_DOMAIN: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def admin_emails(self) -> set:
        return {e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()}

    @property
    def database_url(self) -> str:
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

@lru_cache()
def get_settings():
    return Settings()

settings = get_settings()
