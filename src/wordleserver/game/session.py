"""
=============================================================================
SESSION STORE
=============================================================================

Thread-safe mapping from session token to the game that token is playing.

=============================================================================
LOCKING
=============================================================================

Every worker thread shares one SessionStore. Two locks are involved:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SessionStore._lock          guards the token → Session dict        │
    │      held only for lookups, inserts and deletes (short)             │
    │                                                                      │
    │  Session.lock                guards one session's attempts list     │
    │      held across validate → score → append in submit_guess()        │
    └─────────────────────────────────────────────────────────────────────┘

When both are held, the session lock is taken first; the store lock is
never held while waiting for a session lock.

Holding the session lock across the whole guess matters when the same
token is used from two tabs at once:

    Tab A: len(attempts) == 5 → OK ──┐
    Tab B: len(attempts) == 5 → OK ──┼── without the lock both append
                                      └── and the session ends with 7

With the lock, tab B sees 6 attempts and gets AttemptsExhausted.

=============================================================================
LIFECYCLE
=============================================================================

    (no token / unknown token)
              │ resolve_or_create()
              ▼
          ┌────────┐  submit_guess() ok   ┌────────┐
          │ ACTIVE │ ───────────────────► │ ACTIVE │ ...
          └───┬────┘                      └────────┘
              │ won / exhausted / idle > ttl
              ▼
          removed (token forgotten, next request gets a new one)

=============================================================================
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

from .engine import GameEngine, GuessOutcome, AttemptsExhausted, SessionClosed

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """
    One player's in-progress game.

    Attributes:
        token: Opaque identifier sent to the client as the SESSIONID cookie.
        target_word: Word being guessed, fixed for the session's lifetime.
        attempts: Accepted guesses in submission order.
        created_at: Monotonic creation time.
        last_seen: Monotonic time of the last request using this session.
        finished: True once the session has been won or exhausted.
    """

    token: str
    target_word: str
    attempts: list[str] = field(default_factory=list)
    created_at: float = field(default_factory=time.monotonic)
    last_seen: float = field(default_factory=time.monotonic)
    finished: bool = False
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )


class SessionStore:
    """
    Concurrency-safe token → Session map.

    Usage:
        store = SessionStore(engine)
        token, session, is_new = store.resolve_or_create(request.session_token)
        outcome = store.submit_guess(session, "CRANE")
    """

    def __init__(
        self,
        engine: GameEngine,
        ttl: Optional[float] = 1800.0,
        clock: Callable[[], float] = time.monotonic,
        purge_interval: float = 60.0,
    ):
        """
        Args:
            engine: Game engine used to pick targets and play guesses.
            ttl: Idle seconds after which a session is forgotten.
                 None keeps sessions until they are won or exhausted.
            clock: Time source (monotonic seconds), injectable for tests.
            purge_interval: Minimum seconds between full expiry sweeps
                            triggered by resolve_or_create().
        """
        self._engine = engine
        self._ttl = ttl
        self._clock = clock
        self._purge_interval = purge_interval
        self._next_purge = clock() + purge_interval
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    # =========================================================================
    # LOOKUP / CREATION
    # =========================================================================

    def resolve_or_create(
        self,
        token: Optional[str] = None,
    ) -> tuple[str, Session, bool]:
        """
        Return the live session for token, or start a new one.

        Args:
            token: Token from the request's SESSIONID cookie, if any.

        Returns:
            (token, session, is_new). is_new is True when a token was
            minted, which tells the caller to send Set-Cookie.
        """
        now = self._clock()
        with self._lock:
            if now >= self._next_purge:
                self._purge_expired_locked(now)

            if token is not None:
                session = self._sessions.get(token)
                if session is not None and self._is_expired(session, now):
                    self._sessions.pop(token).finished = True
                    session = None
                if session is not None:
                    session.last_seen = now
                    return token, session, False

            new_token = self._new_token_locked()
            session = Session(
                token=new_token,
                target_word=self._engine.new_target(),
                created_at=now,
                last_seen=now,
            )
            self._sessions[new_token] = session

        logger.info(f"Session {new_token[:8]} created ({len(self)} active)")
        return new_token, session, True

    def get(self, token: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(token)

    def _new_token_locked(self) -> str:
        while True:
            token = str(uuid.uuid4())
            if token not in self._sessions:
                return token

    # =========================================================================
    # MUTATION
    # =========================================================================

    def record_attempt(self, token: str, guess: str) -> tuple[str, ...]:
        """
        Append a guess to a session without validating it.

        Raises:
            KeyError: If the token has no live session.
        """
        session = self.get(token)
        if session is None:
            raise KeyError(token)
        with session.lock:
            session.attempts.append(guess)
            return tuple(session.attempts)

    def submit_guess(self, session: Session, guess: str) -> GuessOutcome:
        """
        Play one guess atomically with respect to other requests.

        The session lock is held across validation, scoring and recording.
        A won or exhausted session is removed from the store before the
        lock is released.

        Raises:
            InvalidGuessLength: Guess has the wrong length (session kept).
            AttemptsExhausted: Session was already full (session removed).
            SessionClosed: Another request finished this session first.
        """
        with session.lock:
            if session.finished:
                raise SessionClosed()

            try:
                outcome = self._engine.play(session, guess)
            except AttemptsExhausted:
                session.finished = True
                self.remove(session.token)
                logger.info(f"Session {session.token[:8]} exhausted")
                raise

            if outcome.won:
                session.finished = True
                self.remove(session.token)
                logger.info(
                    f"Session {session.token[:8]} won in {len(outcome.attempts)}"
                )

            return outcome

    def remove(self, token: str) -> bool:
        """
        Forget a session. Idempotent.

        Returns:
            True if a session was removed, False if none existed.
        """
        with self._lock:
            return self._sessions.pop(token, None) is not None

    # =========================================================================
    # EXPIRY
    # =========================================================================

    def purge_expired(self) -> int:
        """Drop sessions idle for longer than the TTL. Returns the count."""
        with self._lock:
            return self._purge_expired_locked(self._clock())

    def _is_expired(self, session: Session, now: float) -> bool:
        return self._ttl is not None and now - session.last_seen > self._ttl

    def _purge_expired_locked(self, now: float) -> int:
        self._next_purge = now + self._purge_interval
        if self._ttl is None:
            return 0
        expired = [
            token for token, session in self._sessions.items()
            if self._is_expired(session, now)
        ]
        for token in expired:
            self._sessions.pop(token).finished = True
        if expired:
            logger.debug(f"Purged {len(expired)} idle sessions")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._sessions
