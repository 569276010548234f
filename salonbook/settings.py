from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SALONBOOK_", extra="ignore")

    # Booking API
    API_BASE_URL: str = "http://localhost:8000/api"
    API_TOKEN: str | None = None
    REQUEST_TIMEOUT: float = 10.0
    FETCH_BATCH_SIZE: int = 5

    # Scheduling
    SLOT_STEP_MINUTES: int = 15
    BUSINESS_DAY_START: str = "08:00"
    BUSINESS_DAY_END: str = "20:00"
    WRAP_DAY_RANGES: bool = False

    # Web
    SECRET_KEY: str = "salonbook-secret"
    LOG_LEVEL: str = "INFO"
