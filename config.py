import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Application settings
    # Overrides the seed's "name" when set
    library_name: Optional[str] = os.getenv("LIBRARY_NAME")
    app_name: str = os.getenv("APP_NAME", "Library CLI")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG")
    environment: str = os.getenv("ENVIRONMENT", "development")

    # Optional JSON seed file; the bundled demo catalog is used when unset
    seed_file: Optional[str] = os.getenv("LIBRARY_SEED_FILE")

    # Display
    currency: str = os.getenv("CURRENCY", "INR")
    output_mode: str = os.getenv("LIB_CLI_OUTPUT", "plain")

    # Activity log
    activity_log_size: int = int(os.getenv("ACTIVITY_LOG_SIZE", "100"))
    activity_log_visible: int = int(os.getenv("ACTIVITY_LOG_VISIBLE", "5"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "WARNING")


settings = Settings()
