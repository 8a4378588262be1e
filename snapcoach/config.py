from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""

    # "claude" for the live Anthropic provider, "mock" for canned responses
    vision_provider: str = "claude"
    vision_model: str = "claude-sonnet-4-5-20250929"
    vision_max_tokens: int = 1024

    # Anthropic API timeout settings (seconds)
    anthropic_timeout: int = 60
    anthropic_connect_timeout: int = 10

    # Language the model should answer in (coach tips, questions)
    prompt_language: str = "English"

    # Local meal history file
    history_path: str = "data/history.json"

    # Image preprocessing limits
    image_max_bytes: int = 1024 * 1024  # 1MB
    image_max_edge: int = 1024  # px on the long edge

    # Simulated network delay for the mock provider
    mock_latency_seconds: float = 0.0

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
