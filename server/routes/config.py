"""Configuration endpoints: active ranking weights and server settings."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/ranking")
def get_ranking_config():
    """Ranking weights and thresholds in effect for this process."""
    state = get_state()
    return {
        "config": state.ranking_config.model_dump(),
        "hybrid_weights": state.ranking_config.hybrid_weights,
        "source": str(state.config.ranking_config_path) if state.config.ranking_config_path else "defaults",
    }


@router.get("/validate")
def validate_config():
    """Validate server settings (data files, credentials)."""
    state = get_state()
    is_valid, errors = state.config.validate()
    return {"valid": is_valid, "errors": errors}
