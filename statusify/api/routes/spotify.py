"""Spotify app registration (home page) and OAuth callback."""
import html
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from statusify.api.state import AppState, get_state
from statusify.config import STATUSIFY_WEB_ORIGIN
from statusify.errors import AuthorizationError, RequestError
from statusify.models.session import SessionState

logger = logging.getLogger(__name__)

router = APIRouter()

_REGISTRATION_FORM = """<body>
<h1>Statusify</h1>
<p>Create an app on the Spotify developer dashboard and enter its credentials.
The redirect URI must point at <code>/auth</code> on this server.</p>
<form action="/" method="get">
  <p><label>Client ID <input name="clientid"></label></p>
  <p><label>Client secret <input name="clientsecret" type="password"></label></p>
  <p><label>Redirect URI <input name="redirecturi" value="{redirect_uri}"></label></p>
  <p><button type="submit">Save</button></p>
</form>
</body>"""


def _page(message: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(f"<body><p>{message}</p></body>", status_code=status_code)


@router.get("/")
def home(request: Request, state: AppState = Depends(get_state)):
    """Register the Spotify app from query params, then show what is needed next."""
    if "clientid" in request.query_params:
        state.auth_flow.register_app_info(request.query_params)

    session_state = state.session.state
    if session_state is SessionState.INITIALISING:
        return _page("Starting up, try again in a moment.", status_code=503)
    if session_state is SessionState.MISSING_ACCESS_TOKEN:
        try:
            auth_url = state.auth_flow.build_authorization_uri()
        except AuthorizationError as e:
            logger.warning("Home: %s", e)
        else:
            return _page(f'<a href="{html.escape(auth_url)}">Connect Spotify</a>')
    if session_state is not SessionState.READY:
        redirect_uri = str(request.url_for("spotify_callback"))
        return HTMLResponse(_REGISTRATION_FORM.format(redirect_uri=html.escape(redirect_uri)))
    now_playing = state.poller.current
    if now_playing:
        return _page(f"Connected. Now playing: {html.escape(now_playing)}")
    return _page("Connected. Nothing playing right now.")


@router.get("/auth", name="spotify_callback")
def spotify_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    app_state: AppState = Depends(get_state),
):
    """Exchange code for tokens (after checking state), then go back to the home page."""
    if error:
        return _page(f"Spotify authorization failed: {html.escape(error)}", status_code=400)
    if not code or not state:
        return _page("Missing authorization code. Start again from the home page.", status_code=400)
    try:
        app_state.auth_flow.exchange_code(code, state)
    except AuthorizationError as e:
        logger.warning("Callback: %s", e)
        return _page("Authorization rejected. Start again from the home page.", status_code=400)
    except RequestError as e:
        logger.warning("Callback: token check failed: %s", e)
        return _page("Spotify did not accept the new tokens. Try again.", status_code=502)
    if STATUSIFY_WEB_ORIGIN:
        return RedirectResponse(url=STATUSIFY_WEB_ORIGIN, status_code=302)
    return RedirectResponse(url="/", status_code=302)
