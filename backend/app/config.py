from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel


BACKEND_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT = BACKEND_ROOT.parent
DEFAULT_DB_PATH = BACKEND_ROOT / "data" / "vulnsentry.db"


class Settings(BaseModel):
    """Runtime configuration for the VulnSentry API."""

    app_name: str = "VulnSentry API"
    version: str = "1.0.0"
    environment: str = "development"
    database_url: str = f"sqlite:///{DEFAULT_DB_PATH.as_posix()}"
    log_level: str = "INFO"
    allow_origins: list[str] = ["*"]
    data_dir: Path = BACKEND_ROOT / "data"
    template_dir: Path = Path(__file__).resolve().parent / "templates"
    static_dir: Path = Path(__file__).resolve().parent / "static"
    default_user_id: str = "demo-user"
    page_size: int = 10
    seed_demo_data: bool = True

    # Scan lifecycle timers, in seconds
    scan_pending_delay: float = 1.0
    scan_progress_delay: float = 1.5

    # Report generation simulation
    report_delay: float = 2.5
    report_failure_rate: float = 0.1

    # OpenAI-compatible chat completions provider
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    ai_model: str = "gpt-4o-mini"
    ai_timeout: float = 30.0

    @property
    def ai_enabled(self) -> bool:
        return bool(self.openai_api_key)

    @classmethod
    def load(cls) -> "Settings":
        import os

        values: dict[str, object] = {}
        for env_name, field, cast in (
            ("APP_NAME", "app_name", str),
            ("APP_VERSION", "version", str),
            ("ENVIRONMENT", "environment", str),
            ("DB_URL", "database_url", str),
            ("LOG_LEVEL", "log_level", str),
            ("DEFAULT_USER_ID", "default_user_id", str),
            ("PAGE_SIZE", "page_size", int),
            ("SCAN_PENDING_DELAY", "scan_pending_delay", float),
            ("SCAN_PROGRESS_DELAY", "scan_progress_delay", float),
            ("REPORT_DELAY", "report_delay", float),
            ("REPORT_FAILURE_RATE", "report_failure_rate", float),
            ("OPENAI_API_KEY", "openai_api_key", str),
            ("OPENAI_BASE_URL", "openai_base_url", str),
            ("AI_MODEL", "ai_model", str),
            ("AI_TIMEOUT", "ai_timeout", float),
        ):
            raw = os.getenv(env_name)
            if raw:
                values[field] = cast(raw)
        data_dir = os.getenv("DATA_DIR")
        if data_dir:
            values["data_dir"] = Path(data_dir)
        template_dir = os.getenv("TEMPLATE_DIR")
        if template_dir:
            values["template_dir"] = Path(template_dir)
        seed = os.getenv("SEED_DEMO_DATA")
        if seed:
            values["seed_demo_data"] = seed.lower() in {"1", "true", "yes"}
        allowed_origins = os.getenv("ALLOWED_ORIGINS")
        if allowed_origins:
            values["allow_origins"] = [x.strip() for x in allowed_origins.split(",") if x.strip()]
        return cls(**values)


settings = Settings.load()
