"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from discovery.models.config import DEFAULT_CONFIG, RankingConfig

# Single .env at the project root
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)


@dataclass
class ServerConfig:
    """Server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    # Data source: "json" | "firebase"
    data_source: str = "json"
    # When data_source=json: profiles/preferences fixture and optional seed swipes
    profiles_json_path: Optional[Path] = None
    interactions_json_path: Optional[Path] = None
    # When data_source=firebase: path to service account JSON and optional project id
    firebase_credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    # Geocoding: remote lookups only when an API key is set
    google_places_api_key: Optional[str] = None
    geocode_timeout_seconds: float = 3.0

    # Outbound events (match created, swipe undone); logged only when unset
    event_webhook_url: Optional[str] = None

    # Optional JSON file overriding RankingConfig defaults
    ranking_config_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent
        data_source = os.getenv("DATA_SOURCE", "").strip().lower() or "json"
        if data_source not in ("json", "firebase"):
            data_source = "json"

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            data_source=data_source,
            profiles_json_path=_path_env("PROFILES_JSON_PATH", base_dir / "data" / "profiles.json"),
            interactions_json_path=_path_env("INTERACTIONS_JSON_PATH"),
            firebase_credentials_path=_path_env("FIREBASE_CREDENTIALS_PATH") or _path_env("GOOGLE_APPLICATION_CREDENTIALS"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            google_places_api_key=os.getenv("GOOGLE_PLACES_API_KEY") or None,
            geocode_timeout_seconds=float(os.getenv("GEOCODE_TIMEOUT_SECONDS", "3")),
            event_webhook_url=os.getenv("EVENT_WEBHOOK_URL") or None,
            ranking_config_path=_path_env("RANKING_CONFIG_PATH"),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.data_source == "json" and (
            self.profiles_json_path is None or not self.profiles_json_path.is_file()
        ):
            errors.append(f"Profiles JSON not found: {self.profiles_json_path}")

        if self.data_source == "firebase" and not self.firebase_credentials_path:
            errors.append("DATA_SOURCE=firebase requires FIREBASE_CREDENTIALS_PATH")

        if self.ranking_config_path and not self.ranking_config_path.is_file():
            errors.append(f"Ranking config not found: {self.ranking_config_path}")

        return len(errors) == 0, errors

    def load_ranking_config(self) -> RankingConfig:
        """RankingConfig from ranking_config_path merged over defaults, or the defaults."""
        if not self.ranking_config_path or not self.ranking_config_path.is_file():
            return DEFAULT_CONFIG
        with open(self.ranking_config_path) as f:
            return RankingConfig.from_dict(json.load(f))


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
