"""
Shared Firebase app initialization for the Firestore-backed stores.

FirestoreProfileStore and FirestoreInteractionStore reuse the same app
(same credentials_path and project_id).
"""

from pathlib import Path
from typing import Optional, Union

import firebase_admin
from firebase_admin import credentials, firestore


def get_firestore_client(
    project_id: Optional[str] = None,
    credentials_path: Optional[Union[Path, str]] = None,
):
    """Initialize the default Firebase app once and return a Firestore client."""
    if not firebase_admin._apps:
        if credentials_path:
            cred = credentials.Certificate(str(Path(credentials_path).resolve()))
            opts = {"projectId": project_id} if project_id else None
            firebase_admin.initialize_app(cred, opts)
        else:
            firebase_admin.initialize_app(options={"projectId": project_id} if project_id else None)
    return firestore.client()
