"""
Questionnaire scoring rules: PSQI and BSRS-5.

Each question's answer is mapped to a score with ``score_by_category``
(first category contained in the answer wins) and the question scores are
summed. The first question whose answer matches no category fails the
whole score, and the error names that question's number.

PSQI (Pittsburgh Sleep Quality Index): 7 components scored 3..0, total
0-21. Higher is worse.

BSRS-5 (Brief Symptom Rating Scale): 5 items scored 4..0, total 0-20.
"""

from __future__ import annotations

from collections.abc import Sequence

from checkup_derive.exceptions import DerivationError
from checkup_derive.outcome import IntValue
from checkup_derive.rules.base import BaseRule
from checkup_derive.rules.grammar import score_by_category

_WEEKLY_FREQUENCY = ("每週3次以上", "每週1-2次", "每週少於一次", "從未如此")

# One (categories, scores) pair per question, in questionnaire order.
PSQI_QUESTIONS: tuple[tuple[tuple[str, ...], tuple[int, ...]], ...] = (
    # 1. sleep duration
    (("少於5小時", "5-6小時", "6-7小時", "7小時以上"), (3, 2, 1, 0)),
    # 2. sleep latency
    (("61分鐘以上", "31-60分鐘", "15-30分鐘", "少於15分鐘"), (3, 2, 1, 0)),
    # 3. sleep efficiency
    (("少於65%", "65-74%", "75-84%", "85%以上"), (3, 2, 1, 0)),
    # 4. sleep disturbance
    (_WEEKLY_FREQUENCY, (3, 2, 1, 0)),
    # 5. subjective sleep quality; 非常好 must precede 好
    (("非常不好", "不好", "非常好", "好"), (3, 2, 0, 1)),
    # 6. sleep medication
    (_WEEKLY_FREQUENCY, (3, 2, 1, 0)),
    # 7. daytime dysfunction
    (_WEEKLY_FREQUENCY, (3, 2, 1, 0)),
)

BSRS5_CATEGORIES = ("非常厲害", "厲害", "中等", "輕微", "沒有")
BSRS5_SCORES = (4, 3, 2, 1, 0)


def _sum_scores(
    label: str,
    values: Sequence[str],
    questions: Sequence[tuple[Sequence[str], Sequence[int]]],
) -> int:
    total = 0
    for number, (response, (categories, scores)) in enumerate(zip(values, questions), start=1):
        try:
            total += score_by_category(response, categories, scores)
        except DerivationError as exc:
            raise DerivationError(f"[{label}] question {number}: {exc}") from exc
    return total


class PSQIRule(BaseRule):
    name = "psqi"
    arity = 7

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        return IntValue(_sum_scores(label, values, PSQI_QUESTIONS))


class BSRS5Rule(BaseRule):
    name = "bsrs5"
    arity = 5

    def derive(self, label: str, values: Sequence[str]) -> IntValue:
        questions = [(BSRS5_CATEGORIES, BSRS5_SCORES)] * self.arity
        return IntValue(_sum_scores(label, values, questions))
