"""ThresholdEvaluator: category choice, inclusive comparison and reason text."""

from decimal import Decimal

import pytest

from procurement.application.services.threshold_evaluator import (
    ThresholdEvaluator,
    categorize,
    evaluate,
)
from procurement.domain.enums import ThresholdCategory


class TestCategorize:
    def test_works_tag_wins_over_goods(self) -> None:
        assert categorize(["goods", "Construction"]) is ThresholdCategory.WORKS

    def test_goods_services_tags(self) -> None:
        assert categorize(["consulting"]) is ThresholdCategory.GOODS_SERVICES
        assert categorize([" Supplies "]) is ThresholdCategory.GOODS_SERVICES

    def test_unknown_or_empty_tags_are_other(self) -> None:
        assert categorize([]) is ThresholdCategory.OTHER
        assert categorize(["travel", "", "  "]) is ThresholdCategory.OTHER


class TestEvaluate:
    def test_works_at_threshold_requires_executive_approval(self) -> None:
        decision = evaluate(Decimal("5000000"), ["works"])
        assert decision.requires_executive_approval is True
        assert decision.threshold_amount == Decimal("5000000")
        assert decision.category is ThresholdCategory.WORKS
        assert decision.reason == "Works procurement over JMD 5,000,000"

    def test_works_just_below_threshold(self) -> None:
        decision = evaluate(Decimal("4999999.99"), ["works"])
        assert decision.requires_executive_approval is False
        assert decision.reason == "Below executive approval threshold"

    def test_goods_services_threshold_is_three_million(self) -> None:
        decision = evaluate(Decimal("3000000.00"), ["goods"])
        assert decision.requires_executive_approval is True
        assert decision.reason == "Goods/Services procurement over JMD 3,000,000"
        assert evaluate(Decimal("2999999.99"), ["services"]).requires_executive_approval is False

    def test_other_uses_goods_services_amount_with_generic_reason(self) -> None:
        decision = evaluate(Decimal("3500000"), ["travel"])
        assert decision.requires_executive_approval is True
        assert decision.category is ThresholdCategory.OTHER
        assert decision.threshold_amount == Decimal("3000000")
        assert decision.reason == "High-value procurement over JMD 3,000,000"

    def test_goods_over_threshold_with_tag_set(self) -> None:
        decision = evaluate(Decimal("3500000"), {"goods"}, "JMD")
        assert decision.requires_executive_approval is True
        assert decision.threshold_amount == Decimal("3000000")
        assert decision.category is ThresholdCategory.GOODS_SERVICES
        assert decision.reason == "Goods/Services procurement over JMD 3,000,000"

    def test_same_inputs_give_equal_decisions(self) -> None:
        first = evaluate(Decimal("3500000"), {"goods"}, "JMD")
        second = evaluate(Decimal("3500000"), {"goods"}, "JMD")
        assert first == second
        assert first is not second

    def test_reason_uses_given_currency(self) -> None:
        decision = evaluate(Decimal("6000000"), ["infrastructure"], currency="USD")
        assert decision.reason == "Works procurement over USD 5,000,000"

    def test_zero_value_never_requires_approval(self) -> None:
        assert evaluate(Decimal("0"), ["works"]).requires_executive_approval is False

    @pytest.mark.parametrize(
        ("value", "tags", "expected"),
        [
            ("1000", ["works"], True),
            ("999.99", ["works"], False),
            ("500", ["goods"], True),
            ("499.99", ["other-thing"], False),
        ],
    )
    def test_configured_amounts(self, value: str, tags: list[str], expected: bool) -> None:
        evaluator = ThresholdEvaluator(works_amount=Decimal("1000"), goods_services_amount=Decimal("500"))
        assert evaluator.evaluate(Decimal(value), tags).requires_executive_approval is expected

    def test_rules_table_is_read_only(self) -> None:
        evaluator = ThresholdEvaluator()
        with pytest.raises(TypeError):
            evaluator.rules[ThresholdCategory.WORKS] = Decimal("1")  # type: ignore[index]
