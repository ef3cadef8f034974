"""
=============================================================================
GAME
=============================================================================

Word-guessing rules, independent of HTTP.

    words.py    WordDictionary   fixed set of candidate target words
    engine.py   GameEngine       scoring + attempt policy
    session.py  SessionStore     token → Session, thread-safe

    dictionary = WordDictionary.default()
    engine = GameEngine(dictionary)
    store = SessionStore(engine)

    token, session, is_new = store.resolve_or_create(None)
    outcome = store.submit_guess(session, "CRANE")
    str(outcome.result)         # e.g. "BGYBG"

=============================================================================
"""

from .words import WordDictionary, WORD_LENGTH, DEFAULT_WORDS
from .engine import (
    GameEngine,
    GameError,
    InvalidGuessLength,
    AttemptsExhausted,
    SessionClosed,
    Mark,
    ScoreResult,
    GuessOutcome,
    MAX_ATTEMPTS,
    score,
)
from .session import Session, SessionStore

__all__ = [
    "WordDictionary",
    "WORD_LENGTH",
    "DEFAULT_WORDS",
    "GameEngine",
    "GameError",
    "InvalidGuessLength",
    "AttemptsExhausted",
    "SessionClosed",
    "Mark",
    "ScoreResult",
    "GuessOutcome",
    "MAX_ATTEMPTS",
    "score",
    "Session",
    "SessionStore",
]
