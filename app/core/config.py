from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api/v1"

    # Hosted Postgres REST gateway and object storage
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    SUPABASE_ANON_KEY: str = ""
    READ_TIMEOUT_MS: int = 2000
    WRITE_TIMEOUT_MS: int = 3000
    STORAGE_TIMEOUT_MS: int = 10000
    AUDIO_BUCKET: str = "audio-recordings"

    # Tokens
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    TOKEN_SCHEME: str = "jwt"
    ALLOW_QUERY_USER_ID: bool = False

    REDIS_URL: str = "redis://localhost:6379/0"

    # Direct connection, used by Alembic only
    DATABASE_URL: str = ""

    class Config:
        env_file = [".env"]
        case_sensitive = True

    @property
    def service_key(self) -> str:
        """Service-role key, falling back to the anon key"""
        return self.SUPABASE_SERVICE_ROLE_KEY or self.SUPABASE_ANON_KEY

    @property
    def store_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.service_key)


settings = Settings()
