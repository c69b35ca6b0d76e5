"""
Team Balance Scoring

Pure scoring over an explicit roster snapshot. The score rewards diversity
of roles, technical skills and soft skills across the whole roster (leader
included) and saturates once a team reaches the reference counts, so adding
more people with the same profile never raises it.
"""

import math
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Sequence

from teamsync.core.constants import (
    BALANCE_ROLE_REFERENCE,
    BALANCE_ROLE_WEIGHT,
    BALANCE_SKILL_REFERENCE,
    BALANCE_SKILL_WEIGHT,
    BALANCE_SOFT_SKILL_REFERENCE,
    BALANCE_SOFT_SKILL_WEIGHT,
    grade_for_score,
)
from teamsync.models.participant import Participant
from teamsync.models.team import BalanceBreakdown


@dataclass(frozen=True)
class RosterSnapshot:
    """The attributes of one roster member that the score depends on."""

    role: str
    technical_skills: FrozenSet[str] = field(default_factory=frozenset)
    soft_skills: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_participant(cls, participant: Participant) -> "RosterSnapshot":
        return cls(
            role=participant.role_preference,
            technical_skills=frozenset(participant.technical_skills),
            soft_skills=frozenset(participant.soft_skills),
        )


@dataclass(frozen=True)
class BalanceScore:
    total: int
    breakdown: BalanceBreakdown

    @property
    def grade(self) -> str:
        return grade_for_score(self.total)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (17.5 -> 18, 16.5 -> 17).

    The built-in round() rounds half to even, so it is not used here.
    """
    return int(math.floor(value + 0.5))


def _saturating(count: int, reference: int, weight: int) -> float:
    return min((count / reference) * weight, weight)


def _distinct(values: Iterable[Iterable[str]]) -> int:
    merged = set()
    for group in values:
        merged.update(group)
    return len(merged)


def score_roster(roster: Sequence[RosterSnapshot]) -> BalanceScore:
    """Compute the balance score for a full roster."""
    if not roster:
        return BalanceScore(total=0, breakdown=BalanceBreakdown())

    role_count = len({member.role for member in roster})
    skill_count = _distinct(member.technical_skills for member in roster)
    soft_skill_count = _distinct(member.soft_skills for member in roster)

    role_diversity = _saturating(role_count, BALANCE_ROLE_REFERENCE, BALANCE_ROLE_WEIGHT)
    skill_spread = _saturating(skill_count, BALANCE_SKILL_REFERENCE, BALANCE_SKILL_WEIGHT)
    soft_skill_coverage = _saturating(
        soft_skill_count, BALANCE_SOFT_SKILL_REFERENCE, BALANCE_SOFT_SKILL_WEIGHT
    )

    return BalanceScore(
        total=round_half_up(role_diversity + skill_spread + soft_skill_coverage),
        breakdown=BalanceBreakdown(
            role_diversity=round_half_up(role_diversity),
            skill_spread=round_half_up(skill_spread),
            soft_skill_coverage=round_half_up(soft_skill_coverage),
        ),
    )
