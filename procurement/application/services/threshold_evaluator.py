"""Threshold evaluation: does a procurement value require executive approval?

Pure and deterministic. The category is chosen from the request's
procurement type tags; the matching threshold is compared inclusively
against the total value.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

from procurement.domain.enums import ThresholdCategory

WORKS_TAGS = frozenset({"works", "construction", "infrastructure"})
GOODS_SERVICES_TAGS = frozenset(
    {"goods", "services", "consulting", "supplies", "equipment", "materials"}
)

DEFAULT_WORKS_THRESHOLD = Decimal("5000000")
DEFAULT_GOODS_SERVICES_THRESHOLD = Decimal("3000000")


@dataclass(frozen=True)
class ThresholdDecision:
    """Outcome of a threshold evaluation."""

    requires_executive_approval: bool
    threshold_amount: Decimal
    category: ThresholdCategory
    reason: str


def _format_amount(currency: str, amount: Decimal) -> str:
    # Whole units with thousands separators: "JMD 5,000,000"
    return f"{currency} {amount:,.0f}"


def categorize(procurement_types: Iterable[str]) -> ThresholdCategory:
    """Return the threshold category for a set of tags (case-insensitive)."""
    tags = {t.strip().lower() for t in procurement_types if t and t.strip()}
    if tags & WORKS_TAGS:
        return ThresholdCategory.WORKS
    if tags & GOODS_SERVICES_TAGS:
        return ThresholdCategory.GOODS_SERVICES
    return ThresholdCategory.OTHER


class ThresholdEvaluator:
    """Evaluates values against a frozen category -> amount table.

    OTHER has no amount of its own and uses the goods/services threshold.
    """

    def __init__(
        self,
        works_amount: Decimal = DEFAULT_WORKS_THRESHOLD,
        goods_services_amount: Decimal = DEFAULT_GOODS_SERVICES_THRESHOLD,
    ) -> None:
        self._rules: Mapping[ThresholdCategory, Decimal] = MappingProxyType(
            {
                ThresholdCategory.WORKS: Decimal(works_amount),
                ThresholdCategory.GOODS_SERVICES: Decimal(goods_services_amount),
                ThresholdCategory.OTHER: Decimal(goods_services_amount),
            }
        )

    @property
    def rules(self) -> Mapping[ThresholdCategory, Decimal]:
        return self._rules

    def evaluate(
        self,
        total_value: Decimal,
        procurement_types: Iterable[str],
        currency: str = "JMD",
    ) -> ThresholdDecision:
        """Decide whether total_value needs executive approval.

        Args:
            total_value: Request (or aggregate) value.
            procurement_types: Category tags; unknown tags are ignored.
            currency: Currency code used only in the reason text.

        Returns:
            ThresholdDecision with the category, its threshold and a reason.
        """
        category = categorize(procurement_types)
        threshold = self._rules[category]
        requires = Decimal(total_value) >= threshold
        if not requires:
            reason = "Below executive approval threshold"
        elif category is ThresholdCategory.OTHER:
            reason = f"High-value procurement over {_format_amount(currency, threshold)}"
        else:
            reason = (
                f"{category.display_name} procurement over "
                f"{_format_amount(currency, threshold)}"
            )
        return ThresholdDecision(
            requires_executive_approval=requires,
            threshold_amount=threshold,
            category=category,
            reason=reason,
        )


_default_evaluator = ThresholdEvaluator()


def evaluate(
    total_value: Decimal,
    procurement_types: Iterable[str],
    currency: str = "JMD",
) -> ThresholdDecision:
    """Evaluate against the default rule amounts."""
    return _default_evaluator.evaluate(total_value, procurement_types, currency)
