from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "INFO"

    # front-end origin used when building invitation / reset links
    base_url: str = "http://localhost:3000"
    database_url: str = "postgresql+psycopg://app:app@db:5432/collabill"
    redis_url: str = "redis://redis:6379/0"

    jwt_secret: str = "dev-secret-change-me"
    jwt_issuer: str = "collabill"
    jwt_audience: str = "collabill"
    access_token_expires_minutes: int = 60 * 24 * 7

    token_pepper: str = "dev-pepper-change-me"
    invitation_expires_days: int = 7
    password_reset_expires_minutes: int = 60
    bcrypt_rounds: int = 10

    # rate limiting (redis)
    rate_limit_enabled: bool = True
    rate_limit_sign_in_per_min: int = 20
    rate_limit_forgot_password_per_min: int = 10
    rate_limit_reset_password_per_min: int = 20

settings = Settings()
