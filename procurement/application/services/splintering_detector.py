"""Splintering detection: spotting purchases split to stay under a threshold.

A request is flagged when earlier in-flight requests from the same requester
or department, created within a rolling window, bring the combined value to
or above the splintering threshold. The check is advisory and never blocks
a transition.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from procurement.application.dtos.request import SpendRecord
from procurement.domain.enums import RequestStatus

DEFAULT_SPLINTER_THRESHOLD = Decimal("250000")
DEFAULT_SPLINTER_WINDOW_DAYS = 30

S = RequestStatus

# Requests at these statuses still represent committed spend.
ACTIVE_SPEND_STATUSES: frozenset[RequestStatus] = frozenset(
    {
        S.SUBMITTED,
        S.DEPARTMENT_REVIEW,
        S.DEPARTMENT_APPROVED,
        S.EXECUTIVE_REVIEW,
        S.HOD_REVIEW,
        S.FINANCE_REVIEW,
        S.BUDGET_MANAGER_REVIEW,
        S.PROCUREMENT_REVIEW,
        S.FINANCE_APPROVED,
        S.SENT_TO_VENDOR,
    }
)


@dataclass(frozen=True)
class SplinteringCheck:
    """Outcome of a splintering check for one request."""

    flagged: bool
    threshold: Decimal
    window_days: int
    prior_total: Decimal
    combined_total: Decimal
    matches: tuple[SpendRecord, ...]

    @property
    def matching_references(self) -> list[str]:
        return [m.reference for m in self.matches]


class SplinteringDetector:
    def __init__(
        self,
        threshold: Decimal = DEFAULT_SPLINTER_THRESHOLD,
        window_days: int = DEFAULT_SPLINTER_WINDOW_DAYS,
    ) -> None:
        if window_days < 1:
            raise ValueError("window_days must be at least 1")
        self.threshold = Decimal(threshold)
        self.window_days = window_days

    def window_start(self, now: datetime) -> datetime:
        return now - timedelta(days=self.window_days)

    def check(self, total: Decimal, prior: Iterable[SpendRecord]) -> SplinteringCheck:
        """Compare a request's total plus its recent siblings against the threshold.

        A single request with no recent siblings is never flagged, however
        large; that case belongs to the executive approval threshold.
        """
        matches = tuple(sorted(prior, key=lambda r: (r.created_at, r.id)))
        prior_total = sum((m.total_estimated for m in matches), Decimal("0"))
        combined = prior_total + Decimal(total)
        return SplinteringCheck(
            flagged=bool(matches) and combined >= self.threshold,
            threshold=self.threshold,
            window_days=self.window_days,
            prior_total=prior_total,
            combined_total=combined,
            matches=matches,
        )
