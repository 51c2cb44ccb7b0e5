"""Operational scripts (Firestore seeding)."""
