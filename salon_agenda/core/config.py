from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # "memory", "json" or "firestore"; empty picks json in dev/local, memory elsewhere
    STORE_PROVIDER: str = ""
    JSON_STORE_DIR: str = "./data/collections"

    FIRESTORE_PROJECT_ID: str | None = None
    FIRESTORE_DATABASE: str = "(default)"
    FIRESTORE_API_KEY: str | None = None
    FIRESTORE_ACCESS_TOKEN: str | None = None
    FIRESTORE_BASE_URL: str = "https://firestore.googleapis.com/v1"
    FIRESTORE_TIMEOUT_SECONDS: float = 10.0

    BOOKINGS_COLLECTION: str = "bookings"
    SLOTS_COLLECTION: str = "slots"
    AVAILABILITY_COLLECTION: str = "availableSlots"

    PERSIST_DURATION: bool = True
    WEEK_STARTS_ON: int = 0  # 0 = Monday, 6 = Sunday


settings = Settings()
