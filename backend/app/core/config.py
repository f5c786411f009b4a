from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "Timetable Workload API"
    api_prefix: str = "/api"

    database_url: str = "sqlite+pysqlite:///./timetable_workload.db"

    workload_standard_max_hours: float = 40
    workload_underload_threshold: float = 0.5
    workload_preparation_ratio: float = 0.5
    workload_grading_ratio: float = 0.3

    schedule_min_duration_minutes: int = 30
    schedule_max_duration_minutes: int = 180
    conflict_check_class_overlap: bool = False

    @field_validator("api_prefix", mode="before")
    @classmethod
    def normalize_api_prefix(cls, value: str) -> str:
        stripped = str(value or "").strip().rstrip("/")
        if stripped and not stripped.startswith("/"):
            stripped = f"/{stripped}"
        return stripped


@lru_cache
def get_settings() -> Settings:
    return Settings()
