"""Root and health endpoints."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "Discovery Ranking API",
        "version": "1.0.0",
        "data_source": state.config.data_source,
        "stores": {
            "profiles": type(state.profile_store).__name__,
            "interactions": type(state.interaction_store).__name__,
        },
        "endpoints": {
            "discovery": ["/api/discovery/{user_id}"],
            "swipes": ["/api/swipes", "/api/swipes/undo", "/api/swipes/{user_id}/history"],
            "config": ["/api/config/ranking", "/api/config/validate"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    return {
        "status": "healthy",
        "geocoder": {
            "remote": bool(state.config.google_places_api_key),
            "cached_locations": len(state.coordinate_cache),
        },
        "events": type(state.events).__name__,
    }
