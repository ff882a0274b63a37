from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    DATABASE_URL: str = "sqlite+aiosqlite:///./dev.db"
    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_MINUTES: int = 15
    REFRESH_TOKEN_DAYS: int = 30

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Remote functions (AI plan generation, user management).
    # An empty base URL means admin user actions are applied locally.
    FUNCTIONS_BASE_URL: str = ""
    FUNCTIONS_API_KEY: str = ""
    REMOTE_TIMEOUT_SECONDS: float = 30.0

    DEFAULT_REST_SECONDS: int = 90
    DEFAULT_TARGET_REPS: int = 10
    WORKOUT_FINISH_XP: int = 10
    HISTORY_PAGE_MAX: int = 100

settings = Settings()
