"""Runtime configuration loaded from environment variables."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field


DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


class Settings(BaseModel):
    """Application configuration settings."""

    data_dir: Path = Path("data")
    upload_dir: Path | None = None

    # completion backend (OpenAI compatible)
    typhoon_api_key: str | None = None
    typhoon_base_url: str = "https://api.opentyphoon.ai/v1"
    typhoon_model: str | None = None
    completion_timeout: float = 30.0
    completion_max_retries: int = 1

    # vector index
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "orchard_docs"
    retrieval_top_k: int = 3

    # LINE messaging platform
    line_channel_secret: str | None = None
    line_channel_access_token: str | None = None

    ocr_languages: str = "eng+tha"
    cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @property
    def uploads_path(self) -> Path:
        return self.upload_dir or self.data_dir / "uploads"

    @classmethod
    def from_env(cls) -> "Settings":
        try:
            load_dotenv()
        except OSError:
            # sandboxed environments may refuse access to .env
            pass

        data: dict[str, object] = {}
        mapping = {
            "ORCHARD_DATA_DIR": "data_dir",
            "ORCHARD_UPLOAD_DIR": "upload_dir",
            "TYPHOON_API_KEY": "typhoon_api_key",
            "TYPHOON_BASE_URL": "typhoon_base_url",
            "TYPHOON_MODEL": "typhoon_model",
            "COMPLETION_TIMEOUT": "completion_timeout",
            "COMPLETION_MAX_RETRIES": "completion_max_retries",
            "CHROMA_HOST": "chroma_host",
            "CHROMA_PORT": "chroma_port",
            "CHROMA_COLLECTION": "chroma_collection",
            "RETRIEVAL_TOP_K": "retrieval_top_k",
            "LINE_CHANNEL_SECRET": "line_channel_secret",
            "LINE_CHANNEL_ACCESS_TOKEN": "line_channel_access_token",
            "OCR_LANGUAGES": "ocr_languages",
            "LOG_LEVEL": "log_level",
        }
        for env_name, field_name in mapping.items():
            value = os.getenv(env_name)
            if value:
                data[field_name] = value

        origins_env = os.getenv("API_CORS_ORIGINS", "")
        origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
        if origins:
            data["cors_origins"] = origins

        return cls(**data)
