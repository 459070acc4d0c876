from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Redis (plan store)
    redis_url: str = "redis://localhost:6379/0"
    plan_ttl_hours: int = 24 * 30

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Anthropic
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"

    llm_temperature: float = 0.7

    # Generation modes: deadline (seconds) and output cap (tokens)
    preview_deadline_s: float = 15.0
    preview_max_tokens: int = 1500
    full_deadline_s: float = 20.0
    full_max_tokens: int = 4000

    # Generation queue
    generation_concurrency: int = 1
    generation_cooldown_s: float = 1.0
    generation_retry_backoff_s: float = 1.5
    generation_overhead_s: float = 1.0
    generation_queue_size: int = 100

    # Affiliate partners
    booking_aid: str = ""
    kayak_aid: str = ""
    gyg_partner_id: str = "PUHVJ53"
    widget_marker: str = "634822"
    widget_trs: str = "455192"

    # Content policy
    images_enabled: bool = True
    default_trip_days: int = 5

    # Weather / geocoding (Open-Meteo)
    weather_enabled: bool = True
    weather_timeout_s: float = 3.0
    geocoding_base_url: str = "https://geocoding-api.open-meteo.com/v1"
    forecast_base_url: str = "https://api.open-meteo.com/v1"

    # CORS
    cors_origins: str = "http://localhost:5173"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
