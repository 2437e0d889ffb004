"""
Coronary artery calcium (Agatston) score from free-text imaging reports.

Reports come from several CT vendors and templates, spread across six
report fields (Chest CT, MDCT, coronary CTA in two languages, calcium
score, 心臟鈣化指數). Each field is split on commas and every piece is
searched for:

1. Per-artery sub-scores written as ``* LAD: 120`` for the four named
   coronary arteries (LM, LAD, LCX, RCA). A later mention of the same
   artery replaces an earlier one.
2. Aggregate phrases (``Agatston score:``, ``Total:``, ``calcium score:``,
   ...). These are collected as a cross-check only and never change the
   result; a disagreement with the artery-derived score is logged.

The final score is ``max(sum of artery scores, largest artery score)``.
A report with no recognisable numbers scores 0 rather than failing, since
most examinees have no calcium scan at all.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from checkup_derive.outcome import FloatValue
from checkup_derive.rules.base import BaseRule

logger = logging.getLogger(__name__)

AGGREGATE_PATTERN = re.compile(
    r"(?:Agatston score:|心臟冠狀動脈總鈣化積分:|Total:|calcium score:|total score:"
    r"|coronary artery analysis:)\s*([0-9]+(?:\.[0-9]+)?)"
)
ARTERY_PATTERN = re.compile(r"\*\s*(LM|LAD|LCX|RCA):\s*([0-9]+(?:\.[0-9]+)?)")


def extract_scores(fields: Sequence[str]) -> tuple[dict[str, float], dict[str, float]]:
    """Pull aggregate and per-artery scores out of report text.

    Args:
        fields: Free-text report fields.

    Returns:
        ``(aggregates, arteries)`` where *aggregates* maps the matched
        phrase to its score and *arteries* maps artery name to its score.
    """
    aggregates: dict[str, float] = {}
    arteries: dict[str, float] = {}
    for text in fields:
        for piece in text.split(","):
            match = AGGREGATE_PATTERN.search(piece)
            if match:
                aggregates[match.group(0)] = float(match.group(1))
            match = ARTERY_PATTERN.search(piece)
            if match:
                arteries[match.group(1)] = float(match.group(2))
    return aggregates, arteries


class AgatstonRule(BaseRule):
    name = "agatston"
    arity = 6

    def derive(self, label: str, values: Sequence[str]) -> FloatValue:
        aggregates, arteries = extract_scores(values)

        artery_total = sum(arteries.values(), 0.0)
        artery_max = max(arteries.values(), default=0.0)
        score = max(artery_total, artery_max)

        if aggregates:
            reported = max(aggregates.values())
            logger.debug("%s: aggregate phrases %s", label, aggregates)
            if arteries and reported != score:
                logger.warning(
                    "%s: report aggregate %s disagrees with artery-derived score %s",
                    label, reported, score,
                )
        if arteries:
            logger.debug("%s: artery scores %s -> %s", label, arteries, score)

        return FloatValue(score)
