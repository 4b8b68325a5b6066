"""
Runtime configuration.

Non-secret defaults live in ``config.yaml`` at the repository root; API keys
and endpoints come from the environment (optionally via a ``.env`` file).
Environment variables always win over YAML values.

Usage
-----
    from stock_analyst.utils.config import load_settings

    settings = load_settings()
    settings.max_iterations   # 5
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config.yaml"

# env var -> Settings field
_ENV_OVERRIDES = {
    "OPENAI_API_KEY": "openai_api_key",
    "OPENAI_MODEL": "model",
    "TIINGO_API_KEY": "tiingo_api_key",
    "SERPER_API_KEY": "serper_api_key",
    "TAVILY_API_KEY": "tavily_api_key",
    "PINECONE_API_KEY": "pinecone_api_key",
    "PINECONE_INDEX": "pinecone_index",
    "DISCORD_WEBHOOK_URL": "discord_webhook_url",
    "REPORT_DB_PATH": "report_db_path",
    "MARKET_DATA_PROVIDER": "market_data_provider",
    "VECTOR_BACKEND": "vector_backend",
}


class Settings(BaseModel):
    """All knobs the pipeline factories read."""

    # Generation
    model: str = Field(default="gpt-4.1-mini", description="Chat model used by every worker")
    temperatures: Dict[str, float] = Field(
        default_factory=lambda: {
            "data_analyst": 0.1,
            "news_analyst": 0.3,
            "writer": 0.4,
            "critic": 0.1,
            "archivist": 0.1,
            "page_summarizer": 0.1,
        },
        description="Sampling temperature per worker role",
    )
    embedding_model: str = Field(default="text-embedding-3-small")

    # Pipeline
    max_iterations: int = Field(default=5, ge=1, description="Upper bound on writer/critic rounds")
    archive_top_k: int = Field(default=5, ge=1)
    lookback_days: int = Field(default=30, ge=1)

    # Providers
    market_data_provider: str = Field(default="yfinance", description="'tiingo' or 'yfinance'")
    vector_backend: str = Field(default="local", description="'local' or 'pinecone'")
    report_db_path: Optional[str] = Field(default=None, description="SQLite file; defaults to data/reports.db")
    pinecone_index: str = Field(default="stock-reports")
    discord_max_length: int = Field(default=2000, ge=1)

    # Secrets
    openai_api_key: Optional[str] = None
    tiingo_api_key: Optional[str] = None
    serper_api_key: Optional[str] = None
    tavily_api_key: Optional[str] = None
    pinecone_api_key: Optional[str] = None
    discord_webhook_url: Optional[str] = None

    def temperature_for(self, role: str) -> float:
        return self.temperatures.get(role, 0.1)


def _load_yaml(path: Path) -> dict:
    """Load a YAML config file and return it as a dict (empty dict if missing)."""
    if path.exists():
        with open(path) as f:
            return yaml.safe_load(f) or {}
    return {}


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Build a ``Settings`` object from config.yaml plus environment overrides.

    Parameters
    ----------
    path : Path, optional
        Alternate YAML file (defaults to the repository-level config.yaml).
    """
    load_dotenv()

    values = _load_yaml(Path(path) if path else _CONFIG_PATH)

    for env_name, field_name in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name, "").strip()
        if raw:
            values[field_name] = raw

    return Settings(**values)
