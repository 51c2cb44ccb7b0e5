"""Application state: coordinate cache, geocoder, stores, and the discovery service."""

import logging
from pathlib import Path
from typing import Any, Optional, Tuple

from discovery.geo.geocoder import CoordinateCache, Geocoder
from discovery.models.config import RankingConfig

from .config import ServerConfig, get_config
from .services import (
    DiscoveryService,
    FirestoreInteractionStore,
    FirestoreProfileStore,
    HttpEventChannel,
    InMemoryInteractionStore,
    JsonProfileStore,
    LoggingEventChannel,
)

logger = logging.getLogger(__name__)


class AppState:
    """Global application state. Built once at startup."""

    def __init__(self, config: ServerConfig):
        self.config = config
        self.ranking_config: RankingConfig = config.load_ranking_config()

        # Shared, append-only coordinate cache for the process lifetime
        self.coordinate_cache = CoordinateCache()
        self.geocoder = Geocoder(
            self.coordinate_cache,
            api_key=config.google_places_api_key,
            timeout=config.geocode_timeout_seconds,
        )
        logger.info(
            "[startup] Geocoder: %s", "remote + fallback" if config.google_places_api_key else "fallback only"
        )

        self.profile_store, self.interaction_store = self._create_stores(config)
        logger.info(
            "[startup] Stores: %s, %s",
            type(self.profile_store).__name__, type(self.interaction_store).__name__,
        )

        self.events = (
            HttpEventChannel(config.event_webhook_url, timeout=config.geocode_timeout_seconds)
            if config.event_webhook_url
            else LoggingEventChannel()
        )
        self.discovery = DiscoveryService(
            self.profile_store,
            self.interaction_store,
            geocoder=self.geocoder,
            config=self.ranking_config,
            events=self.events,
        )

    def _create_stores(self, config: ServerConfig) -> Tuple[Any, Any]:
        """Firestore stores when DATA_SOURCE=firebase with valid creds, else JSON + in-memory."""
        if config.data_source == "firebase" and config.firebase_credentials_path:
            cred_path = Path(config.firebase_credentials_path)
            if not cred_path.is_file():
                logger.warning(
                    "[startup] Firestore skipped: credentials path not found or not a file: %s", cred_path
                )
            else:
                return (
                    FirestoreProfileStore(config.firebase_project_id, cred_path),
                    FirestoreInteractionStore(config.firebase_project_id, cred_path),
                )
        return (
            JsonProfileStore(config.profiles_json_path or Path(__file__).resolve().parent.parent / "data" / "profiles.json"),
            InMemoryInteractionStore(config.interactions_json_path),
        )


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state
