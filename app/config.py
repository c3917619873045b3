from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"extra": "ignore", "env_file": ".env", "env_file_encoding": "utf-8"}
    DATABASE_URL: str = "sqlite:///./strings.db"
    PORT: int = 8000

    # Logging configuration used by app.logging
    LOG_LEVEL: str = "INFO"
    CONSOLE_LOG_LEVEL: str = "INFO"

    # Bounds enforced on POST /strings, counted in code points
    MIN_STRING_LENGTH: int = 1
    MAX_STRING_LENGTH: int = 5000

    # Listing / pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    NL_RESULT_LIMIT: int = 100

    # Statements slower than this are logged at WARNING by app.logging
    SLOW_QUERY_THRESHOLD_MS: float = 200


settings = Settings()
