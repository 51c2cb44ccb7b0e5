#!/usr/bin/env python3
"""
Firestore Upload Script Tests

Batching and document shaping for server/scripts/upload_to_firestore.py,
against a mocked Firestore client.

Run:
----
    pytest tests/test_upload_script.py -v
"""

import json
from unittest.mock import MagicMock

from conftest import DATA_DIR

from server.scripts import upload_to_firestore as upload


def _written(db):
    """(collection, doc_id, data) for every batch.set call."""
    out = []
    for call in db.batch.return_value.set.call_args_list:
        ref, data = call.args
        out.append((ref.collection_name, ref.doc_id, data))
    return out


def _mock_db():
    db = MagicMock()

    def collection(name):
        coll = MagicMock()

        def document(doc_id):
            ref = MagicMock()
            ref.collection_name, ref.doc_id = name, doc_id
            return ref

        coll.document.side_effect = document
        return coll

    db.collection.side_effect = collection
    return db


class TestUpload:
    def test_profiles_and_preferences(self):
        with open(DATA_DIR / "profiles.json") as f:
            data = json.load(f)
        db = _mock_db()
        assert upload.upload_profiles(db, data["profiles"]) == len(data["profiles"])
        assert upload.upload_preferences(db, data["preferences"]) == len(data["preferences"])

        written = _written(db)
        users = {doc_id: d for coll, doc_id, d in written if coll == "users"}
        prefs = {doc_id for coll, doc_id, _ in written if coll == "user_preferences"}
        assert set(users) == {str(p["id"]) for p in data["profiles"]}
        assert users["1"]["hasActivatedProfile"] is True
        assert prefs == set(data["preferences"])

    def test_none_values_dropped_and_missing_ids_skipped(self):
        db = _mock_db()
        count = upload.upload_profiles(db, [{"id": 4, "bio": None, "interests": ["a"]}, {"bio": "no id"}])
        assert count == 1
        (_, doc_id, data), = _written(db)
        assert doc_id == "4"
        assert "bio" not in data

    def test_batches_of_500(self):
        db = _mock_db()
        upload.upload_profiles(db, [{"id": i} for i in range(1, 1202)])
        assert db.batch.return_value.commit.call_count == 3
