"""Session status and logout."""
from fastapi import APIRouter, Depends

from statusify.api.state import AppState, get_state

router = APIRouter()


@router.get("/status")
def get_status(state: AppState = Depends(get_state)):
    """Return session state and the last observed track."""
    return {
        "state": state.session.state.value,
        "now_playing": state.poller.current,
        "poller_running": state.poller.is_running,
    }


@router.post("/logout")
def logout(state: AppState = Depends(get_state)):
    """Forget the Spotify tokens and clear the Slack status."""
    state.session.forget_tokens()
    state.status_client.clear_status()
    return {"ok": True, "state": state.session.state.value}
