# teamsync/services/session_state.py
from __future__ import annotations

from typing import MutableMapping

from teamsync.schemas.session import SessionInfo, Theme, View

CURRENT_USER_KEY = "currentUserId"
CURRENT_VIEW_KEY = "currentView"
THEME_KEY = "theme"


class SessionState:
    """
    Persisted navigation state of one client session.

    Two scopes, mirroring browser storage:
    - `session_scope` holds the acting user's id and the last top-level view
    - `local_scope` holds the light/dark preference, which outlives sessions

    Both are plain mappings so callers decide where they live (dicts in
    tests, a shared mapping per process in the API).
    """

    def __init__(
        self,
        session_scope: MutableMapping[str, str] | None = None,
        local_scope: MutableMapping[str, str] | None = None,
    ) -> None:
        self._session = session_scope if session_scope is not None else {}
        self._local = local_scope if local_scope is not None else {}

    @property
    def saved_user_id(self) -> str | None:
        return self._session.get(CURRENT_USER_KEY) or None

    def save_user(self, user_id: str | None) -> None:
        if user_id:
            self._session[CURRENT_USER_KEY] = user_id
        else:
            self._session.pop(CURRENT_USER_KEY, None)

    @property
    def view(self) -> View:
        try:
            return View(self._session.get(CURRENT_VIEW_KEY, View.DASHBOARD.value))
        except ValueError:
            return View.DASHBOARD

    def save_view(self, view: View) -> None:
        self._session[CURRENT_VIEW_KEY] = view.value

    @property
    def theme(self) -> Theme | None:
        value = self._local.get(THEME_KEY)
        try:
            return Theme(value) if value else None
        except ValueError:
            return None

    def save_theme(self, theme: Theme) -> None:
        self._local[THEME_KEY] = theme.value

    def info(self) -> SessionInfo:
        return SessionInfo(
            current_user_id=self.saved_user_id,
            current_view=self.view,
            theme=self.theme,
        )
