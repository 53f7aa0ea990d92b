"""
Parsing and validation of provider quiz responses.
"""
import json
import logging
import random
import re
from typing import Optional

from core.exceptions import QuizParseError
from models.quiz_models import QuizResult

logger = logging.getLogger(__name__)

JSON_OBJECT = re.compile(r'\{.*\}', re.DOTALL)
OPTION_PREFIX = re.compile(r'^[A-D][.)]\s*')
LETTERS = "ABCD"


def parse_quiz_response(text: str, rng: Optional[random.Random] = None) -> QuizResult:
    """
    Parse a provider response into a shuffled QuizResult.

    The first {...} span is decoded as JSON. Options are stripped of any
    letter prefix, shuffled, and re-prefixed A. through D.; `correct` follows
    the correct option's text.

    Raises:
        QuizParseError: missing JSON, invalid JSON, or invalid quiz shape
    """
    match = JSON_OBJECT.search(text or "")
    if not match:
        raise QuizParseError("Could not parse quiz response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.debug(f"Quiz JSON decode failed: {e}")
        raise QuizParseError("Could not parse quiz response") from e

    if not isinstance(data, dict):
        raise QuizParseError("Invalid quiz format")

    question = data.get("question")
    options = data.get("options")
    correct = data.get("correct")

    if not isinstance(question, str) or not question.strip():
        raise QuizParseError("Invalid quiz format: missing question")
    if not isinstance(options, list) or len(options) != 4:
        raise QuizParseError("Quiz must have exactly 4 options")
    if not all(isinstance(option, str) for option in options):
        raise QuizParseError("Quiz options must be strings")
    if not isinstance(correct, str) or not correct.strip():
        raise QuizParseError("Invalid quiz format: missing correct answer")

    correct_letter = correct.strip()[0].upper()
    if correct_letter not in LETTERS:
        raise QuizParseError(f"Invalid correct answer: {correct!r}")
    correct_index = LETTERS.index(correct_letter)

    # Track original positions so duplicate option texts cannot confuse the answer
    clean_options = [(i, OPTION_PREFIX.sub('', option.strip())) for i, option in enumerate(options)]
    (rng or random).shuffle(clean_options)

    new_options = []
    new_correct = ""
    for position, (original_index, option) in enumerate(clean_options):
        letter = LETTERS[position]
        if original_index == correct_index:
            new_correct = letter
        new_options.append(f"{letter}. {option}")

    explanation = data.get("explanation")
    return QuizResult(
        question=question.strip(),
        options=tuple(new_options),
        correct=new_correct,
        explanation=explanation.strip() if isinstance(explanation, str) else "",
    )
