"""Backing logic: stores, event channel, and the discovery service."""

from .discovery_service import DiscoveryService
from .event_channel import EventChannel, HttpEventChannel, LoggingEventChannel
from .interaction_store import FirestoreInteractionStore, InMemoryInteractionStore
from .profile_store import FirestoreProfileStore, JsonProfileStore, ProfileStore

__all__ = [
    "DiscoveryService",
    "EventChannel",
    "FirestoreInteractionStore",
    "FirestoreProfileStore",
    "HttpEventChannel",
    "InMemoryInteractionStore",
    "JsonProfileStore",
    "LoggingEventChannel",
    "ProfileStore",
]
