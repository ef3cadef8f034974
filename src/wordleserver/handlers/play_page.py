"""
=============================================================================
PLAY PAGE
=============================================================================

Renders the HTML document players see at /play.html.

Two states:

    render()                          blank board with the guess form
    render(result, guess)             same page with the scored guess
                                      shown above the form

A scored guess becomes one <span> per letter:

    guess  = TRACE
    result = B G G Y G

    <div id="answer">
      <span class="non-existant-letter">T</span>
      <span class="correct-letter">R</span>
      <span class="correct-letter">A</span>
      <span class="existant-letter">C</span>
      <span class="correct-letter">E</span>
    </div>

The form posts "guess=<word>" back to /play.html, so the page is playable
without any client-side script.

=============================================================================
"""

import html
from typing import Optional

from ..game.engine import Mark, ScoreResult


MARK_CLASSES = {
    Mark.CORRECT: "correct-letter",
    Mark.PRESENT: "existant-letter",
    Mark.ABSENT: "non-existant-letter",
}

GAME_OVER_NOTE = "Gameover!"

_STYLE = """
        body { font-family: Arial, Helvetica, sans-serif; text-align: center; }
        #answer span { font-size: 40px; padding: 0 4px; }
        .correct-letter { background-color: rgb(66, 219, 66); color: rgb(250, 255, 255); }
        .existant-letter { background-color: rgb(250, 237, 62); color: rgb(250, 255, 255); }
        .non-existant-letter { background-color: rgb(51, 51, 49); color: rgb(250, 255, 255); }
        #guess { width: 211px; height: 44px; padding: 5px; border: 1px solid #ccc;
                 border-radius: 5px; margin: 15px 0 10px; }
        input[type="submit"] { background-color: rgb(157, 157, 243); border: none;
                 border-radius: 0.5rem; color: #fff; height: 50px; width: 224px; }
"""

_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>{style}    </style>
</head>
<body>
    <h1>{title}</h1>
    <p id="text">Guess the {length}-letter word in {attempts} tries.</p>
    <div class="input-container">
        <form action="/play.html" method="POST">
{answer}            <input type="text" name="guess" id="guess" maxlength="{length}" autocomplete="off">
            <input type="submit" value="Submit">
        </form>
    </div>
</body>
</html>
"""


def colour_guess(result: ScoreResult, guess: str) -> str:
    """
    One span per guess letter, classed by its mark.

    Letters beyond the result's length are emitted unstyled.
    """
    parts = []
    for i, letter in enumerate(guess):
        text = html.escape(letter)
        if i < len(result.marks):
            parts.append(f'<span class="{MARK_CLASSES[result.marks[i]]}">{text}</span>')
        else:
            parts.append(text)
    return "".join(parts)


class PlayPage:
    """
    Builds the play document.

    Usage:
        page = PlayPage()
        page.render()                                  # GET /play.html
        page.render(outcome.result, outcome.guess,
                    game_over=outcome.won)             # POST /play.html
    """

    def __init__(
        self,
        title: str = "Wordle",
        word_length: int = 5,
        max_attempts: int = 6,
    ):
        self.title = title
        self.word_length = word_length
        self.max_attempts = max_attempts

    def render(
        self,
        result: Optional[ScoreResult] = None,
        guess: Optional[str] = None,
        game_over: bool = False,
    ) -> str:
        answer = ""
        if result is not None and guess is not None:
            coloured = colour_guess(result, guess)
            note = f'\n            <p class="game-over">{GAME_OVER_NOTE}</p>' if game_over else ""
            answer = (
                f'            <div id="answer">\n'
                f"            {coloured}</div>{note}\n"
            )

        return _TEMPLATE.format(
            title=html.escape(self.title),
            style=_STYLE,
            length=self.word_length,
            attempts=self.max_attempts,
            answer=answer,
        )
