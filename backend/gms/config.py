from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "GMS Workshop"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database (used when REMOTE_BACKEND=database and by the seed script)
    DATABASE_URL: str = "sqlite+aiosqlite:///./gms.db"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Offline queue persistence
    QUEUE_STORAGE_BACKEND: str = "file"  # file | redis | memory
    QUEUE_STORAGE_DIR: str = "./.gms-storage"
    QUEUE_STORAGE_KEY: str = "gms_sync_queue"

    # Remote store (central workshop backend)
    REMOTE_BACKEND: str = "mock"  # http | database | mock
    REMOTE_BASE_URL: str = ""
    REMOTE_API_TOKEN: str = ""
    REMOTE_TIMEOUT_SECONDS: float = 15.0
    MOCK_LATENCY_MS: int = 0

    # Connectivity
    START_ONLINE: bool = True
    CONNECTIVITY_PROBE_URL: str = ""
    CONNECTIVITY_PROBE_INTERVAL_SECONDS: float = 30.0
    CONNECTIVITY_PROBE_TIMEOUT_SECONDS: float = 5.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
