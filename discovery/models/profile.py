"""
Profile model: read-only view of a user profile for the ranking pipeline.

Built from store dicts via UserProfile.model_validate(d). Accepts both snake_case
and the camelCase keys used by the mobile client (e.g. dateOfBirth, lastActive).
"""

import json
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..utils.scores import age_on, ensure_utc


class Coordinates(BaseModel):
    """WGS84 point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


def _yes_no(value: Any) -> Any:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, str):
        return value.strip().lower() or None
    return value


class UserProfile(BaseModel):
    """
    Profile attributes used by filters and scorers.

    Everything except id is optional; missing attributes score neutral.
    """

    model_config = ConfigDict(extra="allow", alias_generator=to_camel, populate_by_name=True)

    id: int
    gender: Optional[str] = None
    ethnicity: Optional[str] = None
    secondary_tribe: Optional[str] = None
    religion: Optional[str] = None
    body_type: Optional[str] = None
    education_level: Optional[str] = None
    smoking: Optional[str] = None
    drinking: Optional[str] = None
    has_children: Optional[str] = None
    wants_children: Optional[str] = None
    relationship_goal: Optional[str] = None
    bio: Optional[str] = None
    profession: Optional[str] = None
    interests: List[str] = []
    high_school: Optional[str] = None
    college_university: Optional[str] = None
    # cm
    height: Optional[float] = None
    date_of_birth: Optional[date] = None
    location: Optional[str] = None
    country_of_origin: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    last_active: Optional[datetime] = None
    is_online: bool = False
    photo_url: Optional[str] = None
    is_suspended: bool = False
    suspension_expires_at: Optional[datetime] = None
    profile_hidden: bool = False
    has_activated_profile: bool = True

    @field_validator("smoking", "drinking", "has_children", "wants_children", mode="before")
    @classmethod
    def _normalize_flags(cls, value: Any) -> Any:
        return _yes_no(value)

    @field_validator("interests", mode="before")
    @classmethod
    def _parse_interests(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return []
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                return [part.strip() for part in text.split(",") if part.strip()]
            return parsed if isinstance(parsed, list) else [str(parsed)]
        return value

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def _date_only(cls, value: Any) -> Any:
        # Stores often hold a full timestamp for the birth date.
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    def age(self, today: date) -> Optional[int]:
        """Age on the given day, or None without a birth date."""
        if self.date_of_birth is None:
            return None
        return age_on(self.date_of_birth, today)

    def is_suspended_at(self, now: datetime) -> bool:
        """Suspended with no expiry, or with an expiry still in the future."""
        if not self.is_suspended:
            return False
        if self.suspension_expires_at is None:
            return True
        return ensure_utc(self.suspension_expires_at) > ensure_utc(now)

    def completeness(self, has_preferences: Optional[bool] = None) -> float:
        """
        Share of essential fields filled: bio, photo, profession, interests,
        plus saved preferences when has_preferences is given.
        """
        filled = [
            bool(self.bio and self.bio.strip()),
            bool(self.photo_url),
            bool(self.profession and self.profession.strip()),
            bool(self.interests),
        ]
        if has_preferences is not None:
            filled.append(has_preferences)
        return sum(filled) / len(filled)

    def country_identities(self) -> Set[str]:
        """
        Lower-cased country identities: the last two comma-separated parts of the
        location text (state/country) plus country of origin.
        """
        identities: Set[str] = set()
        if self.location:
            parts = [p.strip().lower() for p in self.location.split(",") if p.strip()]
            identities.update(parts[-2:] if len(parts) > 1 else parts)
        if self.country_of_origin:
            identities.add(self.country_of_origin.strip().lower())
        return identities

    def text_document(self) -> str:
        """Free text used for TF-IDF: bio, profession, interests, goal, schools."""
        parts = [
            self.bio,
            self.profession,
            " ".join(self.interests),
            self.relationship_goal,
            self.high_school,
            self.college_university,
        ]
        return " ".join(p for p in parts if p)


def ensure_profiles(items: List[Union[Dict, "UserProfile"]]) -> List["UserProfile"]:
    """Convert list of dicts or UserProfiles to list of UserProfile models for the pipeline."""
    return [
        UserProfile.model_validate(p) if isinstance(p, dict) else p
        for p in items
    ]
