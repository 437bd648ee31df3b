from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""

    # Probed in order, fastest first. The first model that answers is cached.
    model_priority: list[str] = [
        "claude-haiku-4-5-20251001",
        "claude-sonnet-4-5-20250929",
        "claude-opus-4-1-20250805",
        "claude-3-5-haiku-20241022",
    ]

    # Anthropic API timeout settings (seconds)
    probe_timeout: float = 5.0
    generation_timeout: float = 45.0
    anthropic_connect_timeout: int = 10

    probe_max_tokens: int = 8
    max_output_tokens: int = 4096

    # Coarse fixed-window rate guard for /api/health-advice
    rate_limit_max_requests: int = 10
    rate_limit_window_seconds: int = 60

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    api_version: str = "2.5.0"
    cors_allow_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"


settings = Settings()
