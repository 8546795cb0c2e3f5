import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default="0"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # Database
    database_url: str = field(default_factory=lambda: os.getenv(
        "LIBRARY_DATABASE_URL", "mysql+pymysql://root@localhost:3306/Library"))
    sql_echo: bool = field(default_factory=lambda: _env_flag("LIBRARY_SQL_ECHO"))

    # Daily overdue / flag check
    scheduler_enabled: bool = field(default_factory=lambda: _env_flag("LIBRARY_SCHEDULER_ENABLED", "1"))
    scheduler_timezone: str = field(default_factory=lambda: os.getenv("LIBRARY_SCHEDULER_TIMEZONE", "UTC"))
    overdue_check_hour: int = field(default_factory=lambda: int(os.getenv("LIBRARY_OVERDUE_CHECK_HOUR", "0")))
    overdue_check_minute: int = field(default_factory=lambda: int(os.getenv("LIBRARY_OVERDUE_CHECK_MINUTE", "0")))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LIBRARY_LOG_LEVEL", "INFO"))


settings = Settings()
