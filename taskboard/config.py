from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 5000

    database_url: str = "postgresql+psycopg://app:app@db:5432/taskboard"
    redis_url: str = "redis://redis:6379/0"

    jwt_secret: str = "dev-secret-change-me"
    jwt_issuer: str = "taskboard-api"
    jwt_audience: str = "taskboard-api"
    jwt_expires_minutes: int = 60 * 24 * 7

    bcrypt_rounds: int = 12

    # google oauth
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_callback_url: str = "http://localhost:5000/auth/google/callback"
    frontend_url: str = "http://localhost:3004"

    # roles
    default_role: str = "Developer"
    allow_self_role_change: bool = False

    # rate limiting (redis)
    rate_limit_enabled: bool = True
    rate_limit_auth_register_per_min: int = 10
    rate_limit_auth_login_per_min: int = 30

    log_level: str = "INFO"
    log_json: bool = False

settings = Settings()
