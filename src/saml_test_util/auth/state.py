"""Exception state storage.

A login hands control to an external flow and comes back through a redirect. A
failure during that flow is captured here under an opaque reference id and
re-raised when the admin page is requested again with the reference in its
query string. The two sides are connected only by the reference id.
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, NoReturn, Optional, Tuple

from ..models.instructions import RedirectInstruction
from ..models.requests import EXCEPTION_PARAM, add_query_params, get_query_param
from ..utils.exceptions import NoStateError
from .protocol import ExceptionStateStoreProtocol

logger = logging.getLogger(__name__)


def generate_reference_id() -> str:
    """Generate an unguessable state reference id.

    Format: _<32 hex characters>

    Example:
        >>> reference_id = generate_reference_id()
        >>> assert reference_id.startswith("_")
        >>> assert len(reference_id) == 33
    """
    return f"_{uuid.uuid4().hex}"


@dataclass
class ExceptionState:
    """State correlating a resumed request with a captured failure.

    Attributes:
        return_to: Page the login was started from
        failure: Exception captured during the login, None while pending
    """

    return_to: Optional[str] = None
    failure: Optional[BaseException] = None


class ExceptionStateStore:
    """In-process exception state store with single-use, expiring entries.

    Entries are keyed by exact reference id. ``load`` removes the entry, so a
    reference can be resumed only once.

    Attributes:
        lifetime_seconds: Seconds an entry stays resolvable
    """

    def __init__(
        self,
        lifetime_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.lifetime_seconds = lifetime_seconds
        self._clock = clock
        self._states: Dict[str, Tuple[ExceptionState, float]] = {}
        self._lock = threading.Lock()

    def save(self, state: ExceptionState) -> str:
        reference_id = generate_reference_id()
        expires_at = self._clock() + self.lifetime_seconds
        with self._lock:
            self._purge_expired()
            self._states[reference_id] = (state, expires_at)
        logger.debug(f"Saved exception state {reference_id}")
        return reference_id

    def load(self, reference_id: str) -> Optional[ExceptionState]:
        with self._lock:
            entry = self._states.pop(reference_id, None)
        if entry is None:
            logger.debug(f"Exception state {reference_id} not found")
            return None
        state, expires_at = entry
        if expires_at <= self._clock():
            logger.debug(f"Exception state {reference_id} expired")
            return None
        return state

    def attach_failure(self, reference_id: str, failure: BaseException) -> bool:
        with self._lock:
            entry = self._states.get(reference_id)
            if entry is None or entry[1] <= self._clock():
                return False
            entry[0].failure = failure
        return True

    def __contains__(self, reference_id: object) -> bool:
        with self._lock:
            entry = self._states.get(reference_id)  # type: ignore[arg-type]
        return entry is not None and entry[1] > self._clock()

    def __len__(self) -> int:
        return len(self._states)

    def _purge_expired(self) -> None:
        now = self._clock()
        for reference_id in [r for r, (_, exp) in self._states.items() if exp <= now]:
            del self._states[reference_id]


def capture_and_suspend(
    store: ExceptionStateStoreProtocol,
    failure: BaseException,
    error_url: str,
) -> RedirectInstruction:
    """Store ``failure`` and redirect to ``error_url``.

    If ``error_url`` already names a pending state, the failure is attached to
    it. Otherwise a new state is stored and its reference appended to the URL.

    Returns:
        RedirectInstruction to the error URL carrying the reference
    """
    reference_id = get_query_param(error_url, EXCEPTION_PARAM)
    if reference_id is not None and store.attach_failure(reference_id, failure):
        logger.info(f"Captured {type(failure).__name__} under state {reference_id}")
        return RedirectInstruction(error_url)

    reference_id = store.save(ExceptionState(failure=failure))
    logger.info(f"Captured {type(failure).__name__} under new state {reference_id}")
    return RedirectInstruction(add_query_params(error_url, {EXCEPTION_PARAM: reference_id}))


def resume_or_fail(store: ExceptionStateStoreProtocol, reference_id: Optional[str]) -> NoReturn:
    """Re-raise the failure stored under ``reference_id``.

    Raises:
        NoStateError: If the reference does not resolve, or resolves to a state
            that never captured a failure
        BaseException: The captured failure, unmodified
    """
    state = store.load(reference_id) if reference_id else None
    if state is None or state.failure is None:
        raise NoStateError(reference_id)
    raise state.failure
