#!/usr/bin/env python3
"""
Upload profiles and preferences from a profiles JSON file to Cloud Firestore.

Creates collections:
  - users             (document ID = str(profile id))
  - user_preferences  (document ID = str(user id))

Requires:
  - A Firebase service account JSON key (--credentials or FIREBASE_CREDENTIALS_PATH /
    GOOGLE_APPLICATION_CREDENTIALS).

Usage:
  From repo root:
    python -m server.scripts.upload_to_firestore --credentials path/to/serviceAccountKey.json
  Custom data file:
    python -m server.scripts.upload_to_firestore --credentials key.json --profiles-path data/profiles.json
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List

from server.services.firebase import get_firestore_client

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).resolve().parent.parent.parent
BATCH_SIZE = 500  # Firestore batch write limit


def _sanitize_for_firestore(obj):
    """Recursively drop None values; Firestore stores missing fields as absent."""
    if isinstance(obj, dict):
        return {k: _sanitize_for_firestore(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [_sanitize_for_firestore(x) for x in obj]
    return obj


def _upload(db, collection: str, docs: Dict[str, Dict]) -> int:
    coll = db.collection(collection)
    items = list(docs.items())
    for i in range(0, len(items), BATCH_SIZE):
        batch = db.batch()
        chunk = items[i : i + BATCH_SIZE]
        for doc_id, data in chunk:
            batch.set(coll.document(doc_id), _sanitize_for_firestore(data))
        batch.commit()
        logger.info("[upload] %s: committed batch %d (%d docs)", collection, i // BATCH_SIZE + 1, len(chunk))
    return len(items)


def upload_profiles(db, profiles: List[Dict]) -> int:
    docs = {}
    for profile in profiles:
        if profile.get("id") is None:
            logger.warning("[upload] skipping profile without id: %r", profile)
            continue
        data = dict(profile)
        data.setdefault("hasActivatedProfile", True)
        docs[str(profile["id"])] = data
    return _upload(db, "users", docs)


def upload_preferences(db, preferences: Dict[str, Dict]) -> int:
    return _upload(db, "user_preferences", {str(uid): prefs for uid, prefs in preferences.items()})


def main():
    parser = argparse.ArgumentParser(description="Upload profiles and preferences to Firestore")
    parser.add_argument(
        "--profiles-path",
        type=str,
        default=os.environ.get("PROFILES_JSON_PATH", str(_REPO_ROOT / "data" / "profiles.json")),
        help='Path to a JSON file: {"profiles": [...], "preferences": {"<id>": {...}}}',
    )
    parser.add_argument(
        "--skip-preferences",
        action="store_true",
        help="Do not create/update user_preferences collection",
    )
    parser.add_argument(
        "--credentials",
        type=str,
        default=None,
        metavar="PATH",
        help="Path to Firebase service account JSON key. Else uses FIREBASE_CREDENTIALS_PATH or GOOGLE_APPLICATION_CREDENTIALS.",
    )
    parser.add_argument("--project-id", type=str, default=os.environ.get("FIREBASE_PROJECT_ID"))
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    profiles_path = Path(args.profiles_path)
    if not profiles_path.is_file():
        logger.error("Profiles file not found: %s", profiles_path)
        sys.exit(1)

    cred_path = (
        args.credentials
        or os.environ.get("FIREBASE_CREDENTIALS_PATH")
        or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    )
    if not cred_path:
        logger.error("Provide --credentials PATH or set FIREBASE_CREDENTIALS_PATH.")
        sys.exit(1)
    cred_path = Path(cred_path)
    if not cred_path.is_absolute():
        cred_path = (_REPO_ROOT / cred_path).resolve()
    if not cred_path.exists():
        logger.error("Credentials file not found: %s", cred_path)
        sys.exit(1)

    with open(profiles_path) as f:
        data = json.load(f)
    profiles = data.get("profiles", [])
    preferences = data.get("preferences") or {}
    logger.info("Loaded %d profiles, %d preferences from %s", len(profiles), len(preferences), profiles_path)

    db = get_firestore_client(args.project_id, cred_path)
    n_users = upload_profiles(db, profiles)
    n_prefs = 0 if args.skip_preferences else upload_preferences(db, preferences)
    logger.info("Done. users=%d, user_preferences=%d", n_users, n_prefs)


if __name__ == "__main__":
    main()
