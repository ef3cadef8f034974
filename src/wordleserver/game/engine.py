"""
=============================================================================
GAME ENGINE
=============================================================================

Scoring algorithm and attempt-limit policy for a single game.

=============================================================================
SCORING: THE TWO-PASS ALGORITHM
=============================================================================

Every letter of a guess gets one of three marks:

    G  CORRECT   right letter, right position
    Y  PRESENT   letter is in the target, but somewhere else
    B  ABSENT    letter is not in the target (or its budget is used up)

Duplicate letters are the tricky part. The target's letters form a
budget; each G or Y spends one unit of that letter's budget:

    target = APPLE     budget = {A: 1, P: 2, L: 1, E: 1}
    guess  = PAPAL

    Pass 1 (exact positions)
    ────────────────────────
        index:   0  1  2  3  4
        guess:   P  A  P  A  L
        target:  A  P  P  L  E
                       ▲
                       └── P == P → G, budget P: 2 → 1

    Pass 2 (remaining positions, left to right)
    ───────────────────────────────────────────
        0: P  budget P=1 → Y, P: 1 → 0
        1: A  budget A=1 → Y, A: 1 → 0
        3: A  budget A=0 → B
        4: L  budget L=1 → Y, L: 1 → 0

    Result: Y Y G B Y

Pass 1 must finish before pass 2 starts. Otherwise an early misplaced
letter could spend budget that a later exact match needs.

=============================================================================
ATTEMPT POLICY
=============================================================================

A guess is validated in this order:

    1. Length must equal the word length   → InvalidGuessLength
       (no attempt consumed, session kept)
    2. Fewer than max_attempts recorded    → AttemptsExhausted
       (session is destroyed by the store)
    3. Score, record, report a win if every mark is CORRECT

=============================================================================
"""

import logging
import random
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from .words import WordDictionary

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)


MAX_ATTEMPTS = 6


# =============================================================================
# ERRORS
# =============================================================================

class GameError(Exception):
    """
    Base class for recoverable game errors.

    Carries the HTTP status code and the plain-text message the router
    sends back to the client.
    """

    status_code = 400
    message = "Invalid request"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class InvalidGuessLength(GameError):
    """The guess does not have the target word's length."""

    message = "Invalid request : guess must be 5 letters"


class AttemptsExhausted(GameError):
    """The session already holds the maximum number of attempts."""

    message = "Invalid request : you already tried too many Words"


class SessionClosed(GameError):
    """The session was finished by another request before this guess."""

    message = "Invalid request : this game is already over"


# =============================================================================
# SCORING
# =============================================================================

class Mark(Enum):
    """Per-letter verdict. The value is the wire character."""

    CORRECT = "G"
    PRESENT = "Y"
    ABSENT = "B"


@dataclass(frozen=True)
class ScoreResult:
    """
    Marks for one scored guess, one per letter.

    str(result) gives the wire form, e.g. "BGYYG".
    """

    marks: tuple[Mark, ...]

    @property
    def is_win(self) -> bool:
        return bool(self.marks) and all(m is Mark.CORRECT for m in self.marks)

    def __str__(self) -> str:
        return "".join(m.value for m in self.marks)

    def __len__(self) -> int:
        return len(self.marks)


def score(guess: str, target: str) -> ScoreResult:
    """
    Score a guess against a target word.

    Both words are compared as given; callers uppercase them first.

    Args:
        guess: The guessed word.
        target: The word being guessed.

    Returns:
        ScoreResult with one mark per letter.

    Raises:
        ValueError: If the words have different lengths.
    """
    if len(guess) != len(target):
        raise ValueError(
            f"Cannot score {len(guess)}-letter guess against "
            f"{len(target)}-letter target"
        )

    if guess == target:
        return ScoreResult(tuple(Mark.CORRECT for _ in target))

    budget = Counter(target)
    marks: list[Optional[Mark]] = [None] * len(guess)

    # Pass 1: exact positions
    for i, (g, t) in enumerate(zip(guess, target)):
        if g == t:
            marks[i] = Mark.CORRECT
            budget[g] -= 1

    # Pass 2: whatever budget is left
    for i, g in enumerate(guess):
        if marks[i] is not None:
            continue
        if budget[g] > 0:
            marks[i] = Mark.PRESENT
            budget[g] -= 1
        else:
            marks[i] = Mark.ABSENT

    return ScoreResult(tuple(marks))


@dataclass(frozen=True)
class GuessOutcome:
    """Result of one accepted guess."""

    guess: str
    result: ScoreResult
    attempts: tuple[str, ...]
    won: bool

    @property
    def result_text(self) -> str:
        """Wire result: the marks, or "GGGGG GAMEOVER" on a win."""
        if self.won:
            return f"{self.result} GAMEOVER"
        return str(self.result)


# =============================================================================
# ENGINE
# =============================================================================

class GameEngine:
    """
    Picks target words and applies the attempt policy to sessions.

    The engine holds no per-session state. play() mutates the session it is
    given, so the caller must hold that session's lock (SessionStore does).
    """

    def __init__(
        self,
        dictionary: WordDictionary,
        max_attempts: int = MAX_ATTEMPTS,
        rng: Optional[random.Random] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.dictionary = dictionary
        self.max_attempts = max_attempts
        self._rng = rng or random.Random()

    @property
    def word_length(self) -> int:
        return self.dictionary.word_length

    def new_target(self) -> str:
        """Choose a fresh target word."""
        return self.dictionary.choose(self._rng)

    def validate(self, session: "Session", guess: str) -> None:
        """
        Check a guess against the attempt policy without recording it.

        Raises:
            InvalidGuessLength: Guess length differs from the word length.
            AttemptsExhausted: The session is already at max_attempts.
        """
        if len(guess) != self.word_length:
            raise InvalidGuessLength(
                f"Invalid request : guess must be {self.word_length} letters"
            )
        if len(session.attempts) >= self.max_attempts:
            raise AttemptsExhausted()

    def play(self, session: "Session", guess: str) -> GuessOutcome:
        """
        Validate, score and record one guess.

        Args:
            session: The session to play in. Caller holds session.lock.
            guess: Uppercased guess.

        Returns:
            GuessOutcome for the recorded guess.
        """
        self.validate(session, guess)

        result = score(guess, session.target_word)
        session.attempts.append(guess)

        won = result.is_win
        logger.debug(
            f"Session {session.token[:8]} guess {guess} -> {result} "
            f"({len(session.attempts)}/{self.max_attempts})"
        )
        return GuessOutcome(
            guess=guess,
            result=result,
            attempts=tuple(session.attempts),
            won=won,
        )
