"""
=============================================================================
WORD DICTIONARY
=============================================================================

The immutable set of words a session's target can be drawn from.

The dictionary is built exactly once at startup (from the built-in list or
from a word file given on the command line) and is read-only afterwards,
so every worker thread can share it without locking.

=============================================================================
WORD FILE FORMAT
=============================================================================

    # comments and blank lines are ignored
    crane
    Slate
    TRACE

Words are normalized to UPPERCASE. Every word must be alphabetic and have
the dictionary's word length (5 by default), otherwise loading fails.

=============================================================================
"""

import logging
import random
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

logger = logging.getLogger(__name__)


WORD_LENGTH = 5

DEFAULT_WORDS = (
    "ABOUT", "ACTOR", "ADAPT", "AGENT", "ALARM", "ALBUM", "ALERT", "ALIVE",
    "ANGEL", "ANGLE", "APPLE", "ARENA", "ARISE", "AWARD", "BACON", "BADGE",
    "BAKER", "BEACH", "BEAST", "BENCH", "BERRY", "BLADE", "BLAME", "BLAST",
    "BLEND", "BLOOM", "BOARD", "BRAIN", "BRAVE", "BREAD", "BRICK", "BRUSH",
    "CABLE", "CANDY", "CARGO", "CHAIN", "CHAIR", "CHALK", "CHARM", "CHEST",
    "CHIEF", "CLIMB", "CLOCK", "CLOUD", "COACH", "COAST", "CORAL", "CRANE",
    "CREAM", "CROWN", "DANCE", "DEPTH", "DREAM", "DRESS", "DRIFT", "EAGLE",
    "EARTH", "ELBOW", "EMBER", "ENJOY", "EQUAL", "FAITH", "FEAST", "FIELD",
    "FLAME", "FLASK", "FLOOR", "FOCUS", "FORGE", "FRAME", "FRESH", "FRUIT",
    "GHOST", "GIANT", "GLASS", "GLOBE", "GRACE", "GRAIN", "GRAPE", "GREEN",
    "GUARD", "GUIDE", "HABIT", "HEART", "HONEY", "HORSE", "HOTEL", "HOUSE",
    "IMAGE", "IVORY", "JELLY", "JEWEL", "JUICE", "KNIFE", "LASER", "LEMON",
    "LEVEL", "LIGHT", "LUNAR", "MAGIC", "MAPLE", "MARCH", "MEDAL", "METAL",
    "MODEL", "MONEY", "MOUSE", "MUSIC", "NERVE", "NIGHT", "NOBLE", "OCEAN",
    "OLIVE", "ORBIT", "PAINT", "PANEL", "PAPER", "PEACH", "PEARL", "PIANO",
    "PILOT", "PLANT", "PLAZA", "POINT", "PRIDE", "PRISM", "QUEEN", "QUIET",
    "RADAR", "RAVEN", "RIVER", "ROBOT", "ROUTE", "SALAD", "SCALE", "SCENE",
    "SHADE", "SHELL", "SHINE", "SKILL", "SLATE", "SMILE", "SNAKE", "SOLAR",
    "SPACE", "SPARK", "SPICE", "STAGE", "STONE", "STORM", "SUGAR", "SWORD",
    "TABLE", "TIGER", "TOAST", "TORCH", "TOWER", "TRACE", "TRAIN", "TRUST",
    "UNCLE", "UNITY", "VALUE", "VAPOR", "VIVID", "VOICE", "WAGON", "WATER",
    "WHALE", "WHEAT", "WORLD", "YACHT", "YOUTH", "ZEBRA",
)


class WordDictionary:
    """
    Immutable set of candidate target words.

    Membership tests go through a frozenset; random choice goes through a
    sorted tuple so that every word has the same probability of being
    drawn regardless of set iteration order.

    Example:
        words = WordDictionary(["crane", "slate"])
        "CRANE" in words   # True
        words.choose()     # "CRANE" or "SLATE"
    """

    def __init__(self, words: Iterable[str], word_length: int = WORD_LENGTH):
        normalized = set()
        for word in words:
            word = word.strip().upper()
            if len(word) != word_length or not word.isalpha():
                raise ValueError(
                    f"Invalid word {word!r}: expected {word_length} letters"
                )
            normalized.add(word)

        if not normalized:
            raise ValueError("Word dictionary is empty")

        self.word_length = word_length
        self._words = frozenset(normalized)
        self._ordered = tuple(sorted(normalized))

    @classmethod
    def default(cls) -> "WordDictionary":
        """Dictionary built from the bundled word list."""
        return cls(DEFAULT_WORDS)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        word_length: int = WORD_LENGTH,
    ) -> "WordDictionary":
        """
        Load a newline-separated word file.

        Blank lines and lines starting with '#' are skipped.

        Raises:
            OSError: If the file cannot be read.
            ValueError: If a word is malformed or the file has no words.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            words = [
                line.strip()
                for line in f
                if line.strip() and not line.lstrip().startswith("#")
            ]
        dictionary = cls(words, word_length=word_length)
        logger.info(f"Loaded {len(dictionary)} words from {path}")
        return dictionary

    def choose(self, rng: Optional[random.Random] = None) -> str:
        """Pick a word uniformly at random."""
        return (rng or random).choice(self._ordered)

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.upper() in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ordered)

    def __repr__(self) -> str:
        return f"WordDictionary({len(self)} words, length={self.word_length})"
