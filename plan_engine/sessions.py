"""
IRH Plan Sessions
=================

In-memory store of configuration sessions for the HTTP layer.

Each session owns one SelectionController. Nothing is persisted: the
finished plan is handed to billing as a quote. The oldest sessions are
dropped once max_sessions is reached.
"""

import logging
import uuid
from collections import OrderedDict
from typing import Optional

from .catalog import Catalogs
from .controller import SelectionController
from .selection import Selection

logger = logging.getLogger(__name__)


class SessionNotFound(KeyError):
    """No configuration session with this id."""


class PlanSessionStore:
    """Maps session ids to their selection controllers."""

    def __init__(self, catalogs: Catalogs, max_sessions: int = 10000):
        self.catalogs = catalogs
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, SelectionController]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, initial: Optional[Selection] = None) -> SelectionController:
        session_id = uuid.uuid4().hex
        controller = SelectionController(self.catalogs, initial=initial, session_id=session_id)
        self._sessions[session_id] = controller

        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted plan session {evicted}", extra={"session_id": evicted})

        return controller

    def get(self, session_id: str) -> SelectionController:
        try:
            controller = self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None
        self._sessions.move_to_end(session_id)
        return controller

    def discard(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None
