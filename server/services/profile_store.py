"""
Profile store: read-only access to profiles and stored preferences.

Persistence to JSON file or Firestore depending on DATA_SOURCE.
Stored preference blobs are parsed here, at the storage boundary, via
UserPreferences.from_storage; malformed fields never reach the ranking pipeline.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from discovery.models.interaction import AppMode
from discovery.models.preferences import UserPreferences
from discovery.models.profile import UserProfile

from .firebase import get_firestore_client

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    """Protocol for profile reads. Implement for JSON file or Firestore."""

    def get_profile(self, user_id: int) -> Optional[UserProfile]:
        """Return the profile if it exists, else None."""
        ...

    def get_preferences(self, user_id: int) -> UserPreferences:
        """Return parsed preferences; permissive defaults when none are stored."""
        ...

    def list_candidates(self, user_id: int, mode: AppMode) -> List[UserProfile]:
        """Candidate pool for user_id in mode (everyone but the user; filters run later)."""
        ...

    def list_profiles(self) -> List[UserProfile]:
        ...

    def list_preferences(self) -> Dict[int, UserPreferences]:
        """Parsed preferences for every user that has saved them."""
        ...


def _parse_profile(data: Dict, source: str) -> Optional[UserProfile]:
    try:
        return UserProfile.model_validate(data)
    except ValueError as e:
        logger.warning("[profile_store] skipping malformed profile from %s id=%r: %s", source, data.get("id"), e)
        return None


class JsonProfileStore:
    """
    Profile store backed by a JSON file:
    { "profiles": [ {...}, ... ], "preferences": { "<user_id>": {...}, ... } }
    """

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path)
        self._profiles: Dict[int, UserProfile] = {}
        self._raw_preferences: Dict[int, Dict] = {}
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            logger.warning("[profile_store] JSON file not found: %s", self._path)
            return
        with open(self._path) as f:
            data = json.load(f)
        for item in data.get("profiles", []):
            profile = _parse_profile(item, str(self._path))
            if profile is not None:
                self._profiles[profile.id] = profile
        for uid, prefs in (data.get("preferences") or {}).items():
            if isinstance(prefs, dict):
                self._raw_preferences[int(uid)] = prefs
        logger.info(
            "[profile_store] loaded %d profiles, %d preferences from %s",
            len(self._profiles), len(self._raw_preferences), self._path,
        )

    def get_profile(self, user_id: int) -> Optional[UserProfile]:
        return self._profiles.get(user_id)

    def get_preferences(self, user_id: int) -> UserPreferences:
        return UserPreferences.from_storage(self._raw_preferences.get(user_id), user_id=user_id)

    def list_candidates(self, user_id: int, mode: AppMode) -> List[UserProfile]:
        return [p for uid, p in sorted(self._profiles.items()) if uid != user_id]

    def list_profiles(self) -> List[UserProfile]:
        return [p for _, p in sorted(self._profiles.items())]

    def list_preferences(self) -> Dict[int, UserPreferences]:
        return {
            uid: UserPreferences.from_storage(raw, user_id=uid)
            for uid, raw in sorted(self._raw_preferences.items())
        }


class FirestoreProfileStore:
    """
    Profile store backed by Firestore collections 'users' and 'user_preferences'.
    Document ID = str(user_id).
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
    ):
        self._db = get_firestore_client(project_id, credentials_path)
        self._users = self._db.collection("users")
        self._preferences = self._db.collection("user_preferences")

    def _doc_to_profile(self, doc) -> Optional[UserProfile]:
        d = doc.to_dict() or {}
        d.setdefault("id", int(doc.id))
        return _parse_profile(d, "firestore")

    def get_profile(self, user_id: int) -> Optional[UserProfile]:
        doc = self._users.document(str(user_id)).get()
        if not doc.exists:
            return None
        return self._doc_to_profile(doc)

    def get_preferences(self, user_id: int) -> UserPreferences:
        doc = self._preferences.document(str(user_id)).get()
        raw = doc.to_dict() if doc.exists else None
        return UserPreferences.from_storage(raw, user_id=user_id)

    def list_candidates(self, user_id: int, mode: AppMode) -> List[UserProfile]:
        query = self._users.where("hasActivatedProfile", "==", True)
        out = []
        for doc in query.stream():
            profile = self._doc_to_profile(doc)
            if profile is not None and profile.id != user_id:
                out.append(profile)
        return sorted(out, key=lambda p: p.id)

    def list_profiles(self) -> List[UserProfile]:
        out = [p for p in (self._doc_to_profile(doc) for doc in self._users.stream()) if p is not None]
        return sorted(out, key=lambda p: p.id)

    def list_preferences(self) -> Dict[int, UserPreferences]:
        out = {}
        for doc in self._preferences.stream():
            uid = int(doc.id)
            out[uid] = UserPreferences.from_storage(doc.to_dict(), user_id=uid)
        return out
