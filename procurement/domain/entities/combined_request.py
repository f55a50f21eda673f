"""Combined request aggregate: one parent holding ordered lots."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from procurement.domain.entities.request import RequestEntity, to_money


@dataclass
class CombinedRequestEntity:
    """Multi-lot submission. Aggregates are computed from the current lot rows."""

    id: int | None
    reference: str
    title: str
    description: str | None
    created_by_id: int
    config: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    lots: list[RequestEntity] = field(default_factory=list)

    @property
    def lots_count(self) -> int:
        return len(self.lots)

    @property
    def total_value(self) -> Decimal:
        return to_money(sum((lot.total_estimated for lot in self.lots), Decimal("0")))

    @property
    def total_items(self) -> int:
        return sum(len(lot.items) for lot in self.lots)

    def ordered_lots(self) -> list[RequestEntity]:
        return sorted(self.lots, key=lambda lot: lot.lot_number or 0)
