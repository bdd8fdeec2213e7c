from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ZENKIT_API_TOKEN: str | None = None  # Zenkit-API-Key
    ZENKIT_API_ENDPOINT: str = "https://zenkit.com/api/v1"

    # HTTP
    ZENKIT_HTTP_TIMEOUT: float = 30.0
    ZENKIT_MAX_RETRIES: int = 3

    # 这些远端错误码 (或错误名) 被归类为频控
    ZENKIT_RATE_LIMIT_CODES: list[str] = ["RATE_LIMIT_EXCEEDED", "TOO_MANY_REQUESTS"]

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


settings = Settings()
