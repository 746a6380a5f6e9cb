from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DB_USER: str = "arhub"
    DB_PASSWORD: str = "arhub"
    DB_HOST: str = "127.0.0.1"
    DB_PORT: str = "3306"
    DB_NAME: str = "arhub"
    # Full URL override, e.g. sqlite:///./arhub.db for local runs
    DATABASE_URL: str | None = None

    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # Object storage (S3 / R2 compatible)
    S3_ENDPOINT: str | None = None
    S3_REGION: str = "auto"
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_BUCKET_PUBLIC: str = ""
    S3_PUBLIC_BASE_URL: str | None = None
    SIGNED_URL_TTL_SECONDS: int = 3600

    ANALYTICS_RATE_LIMIT: int = 1000
    ANALYTICS_RATE_WINDOW_SECONDS: int = 60

    SEARCH_DEFAULT_LIMIT: int = 12
    SEARCH_MAX_LIMIT: int = 50
    PROJECTS_PAGE_SIZE: int = 12

    SESSION_COOKIE_NAME: str = "session_token"

    EVENTS_HEARTBEAT_SECONDS: float = 30
    IMAGE_PROXY_TIMEOUT_SECONDS: float = 10
    IMAGE_PROXY_USER_AGENT: str = "ARHub-ImageOptimizer/1.0"

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


settings = Settings()
