"""Allow-list for editing cost-sensitive purchase order fields.

Only the listed account ids may enter or change base unit price, vendor and
warehouse shipping cost, quantity, commission type/rate, back margin and
advance payment rate. Independent of the level-based permission matrix.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Tuple

COST_INPUT_ALLOWED_USER_IDS: Tuple[str, ...] = ('venpus',)

COST_FIELDS: Tuple[str, ...] = (
    'unit_price',
    'back_margin',
    'quantity',
    'commission_type',
    'commission_rate',
    'shipping_cost',
    'warehouse_shipping_cost',
    'advance_payment_rate',
)


@dataclass(frozen=True)
class CostInputPolicy:
    allowed_user_ids: FrozenSet[str]

    @classmethod
    def from_ids(cls, ids: Optional[Iterable[str]] = None) -> 'CostInputPolicy':
        if ids is None:
            ids = COST_INPUT_ALLOWED_USER_IDS
        return cls(frozenset(ids))

    def allows(self, user_id: Optional[str]) -> bool:
        if not user_id:
            return False
        # exact, case-sensitive match
        return user_id in self.allowed_user_ids


def touches_cost_fields(data: dict) -> bool:
    # presence counts, even an explicit null
    return any(k in data for k in COST_FIELDS)
