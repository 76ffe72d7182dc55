"""Application configuration via environment variables."""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/liftquote"

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Anthropic (field extractor)
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 400
    llm_timeout_seconds: float = 15.0

    # Twilio (WhatsApp)
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_whatsapp_number: str = ""  # e.g. "+14155238886" for sandbox

    # App
    log_level: str = "INFO"
    environment: str = "development"

    # Company (single scoping key)
    company_name: str = "TSC Industrial"

    # Pricing
    vat_rate: float = 0.16
    default_equipment_model: str = "45FT"
    default_transport_round_trip: int = 0
    transport_by_city: dict[str, int] = {}  # city -> round trip MXN

    # Qualification
    require_contact_email: bool = False

    # Inbound de-duplication
    inbound_dedup_ttl_seconds: int = 86400  # 24 hours

    # Quote terms shown in the rendered document
    quote_terms: list[str] = [
        "Importe principal corresponde exactamente a la duración solicitada.",
        "Precios sin IVA + IVA 16% por separado.",
        "Transporte redondo según zona (si aplica).",
        "Vigencia: 48 horas.",
    ]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("transport_by_city")
    @classmethod
    def _lowercase_cities(cls, value: dict[str, int]) -> dict[str, int]:
        return {city.strip().lower(): amount for city, amount in value.items()}


settings = Settings()
