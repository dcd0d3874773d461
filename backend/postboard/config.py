from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///postboard.db"
    secret_key: str = "change-me-in-production"
    token_algorithm: str = "HS256"
    access_token_expire_minutes: int = 24 * 60
    bcrypt_rounds: int = 10
    api_prefix: str = "/api"
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    class Config:
        env_prefix = "POSTBOARD_"


settings = Settings()
