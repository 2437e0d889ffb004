"""
Supporting grammars shared by the lifestyle and questionnaire rules.

Questionnaire answers arrive as free text such as ``"3天"`` or
``"1小時30分鐘"``. These helpers turn them into integers:

- ``parse_day_count``: blank -> 0, bare integer -> itself, ``"<N>天"`` -> N.
- ``parse_duration_minutes``: blank -> 0, bare integer -> minutes,
  ``"<H>小時<M>分鐘"`` / ``"<H>小時"`` / ``"<M>分鐘"`` -> H*60 + M.
- ``score_by_category``: first category contained in the response wins.

All of them raise ``DerivationError`` on text they do not recognise.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from checkup_derive.exceptions import DerivationError

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
_DAY_PATTERN = re.compile(r"(\d+)天")
_HOUR_MINUTE_PATTERN = re.compile(r"(\d+)小時(\d+)?分鐘?")
_HOUR_PATTERN = re.compile(r"(\d+)小時")
_MINUTE_PATTERN = re.compile(r"(\d+)分鐘")


def _bare_integer(text: str) -> int | None:
    if _INTEGER_PATTERN.fullmatch(text):
        return int(text)
    return None


def parse_day_count(text: str) -> int:
    """Parse a days-per-week answer.

    Args:
        text: Raw answer, e.g. ``""``, ``"3"`` or ``"3天"``.

    Returns:
        Number of days.

    Raises:
        DerivationError: If the answer matches none of the accepted forms.
    """
    text = text.strip()
    if text == "":
        return 0

    number = _bare_integer(text)
    if number is not None:
        return number

    match = _DAY_PATTERN.search(text)
    if match:
        return int(match.group(1))

    raise DerivationError(f"Cannot parse day count: {text!r}")


def parse_duration_minutes(text: str) -> int:
    """Parse a duration answer into minutes.

    A bare integer is taken as minutes. ``"1小時"`` is 60, ``"1小時30分"``
    and ``"1小時30分鐘"`` are 90, ``"45分鐘"`` is 45.

    Raises:
        DerivationError: If the answer matches none of the accepted forms.
    """
    text = text.strip()
    if text == "":
        return 0

    number = _bare_integer(text)
    if number is not None:
        return number

    match = _HOUR_MINUTE_PATTERN.search(text)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2)) if match.group(2) else 0
        return hours * 60 + minutes

    match = _HOUR_PATTERN.search(text)
    if match:
        return int(match.group(1)) * 60

    match = _MINUTE_PATTERN.search(text)
    if match:
        return int(match.group(1))

    raise DerivationError(f"Cannot parse duration (minutes): {text!r}")


def score_by_category(
    response: str,
    categories: Sequence[str],
    scores: Sequence[int],
) -> int:
    """Map a questionnaire response to a score.

    Categories are tried in order and the first one whose text is contained
    in *response* determines the score, so more specific categories must be
    listed before the shorter categories they contain.

    Args:
        response: Raw answer text.
        categories: Ordered category strings.
        scores: Score for each category (same length as *categories*).

    Returns:
        The score of the first matching category.

    Raises:
        DerivationError: If no category is contained in the response.
    """
    for category, score in zip(categories, scores):
        if category in response:
            return score
    raise DerivationError(f"Unrecognised response: {response!r}")
