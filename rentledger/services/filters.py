"""Transaction filters used by the aggregation and analytics services."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rentledger.core.errors import ValidationError
from rentledger.models import TransactionType

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from rentledger.services.store import TransactionRecord

# Simplified revenue categories offered by the dashboard, each standing for a
# set of stored categories.
COMPOSITE_CATEGORIES: Mapping[str, frozenset[str]] = {
    "aluguel_simples": frozenset({"rent", "Rent"}),
    "outras_receitas": frozenset({"other"}),
    "aluguel_total": frozenset({"rent", "Rent", "other"}),
}

_ALL_TYPES = frozenset(TransactionType)


def resolve_categories(selected: Iterable[str] | None) -> frozenset[str] | None:
    """Expand composite tags into stored categories. ``None`` means no category filter."""
    if not selected:
        return None
    resolved: set[str] = set()
    for tag in selected:
        tag = tag.strip()
        if not tag:
            continue
        resolved |= COMPOSITE_CATEGORIES.get(tag, frozenset({tag}))
    return frozenset(resolved) or None


@dataclass(frozen=True, slots=True)
class TypeSelection:
    """Selected transaction types. Never empty."""

    types: frozenset[TransactionType] = _ALL_TYPES

    def __post_init__(self) -> None:
        if not self.types:
            raise ValidationError("At least one transaction type must be selected", field="transactionTypes")

    @classmethod
    def parse(cls, raw: Iterable[str] | None) -> "TypeSelection":
        values = [item.strip() for item in raw or () if item and item.strip()]
        if not values:
            return cls()
        try:
            return cls(frozenset(TransactionType(value) for value in values))
        except ValueError as exc:
            raise ValidationError(
                f"Unknown transaction type in {values!r}; expected 'revenue' or 'expense'",
                field="transactionTypes",
            ) from exc

    def toggle(self, transaction_type: TransactionType | str) -> "TypeSelection":
        """Flip one type. Removing the last selected type selects the other one instead."""
        transaction_type = TransactionType(transaction_type)
        if transaction_type in self.types:
            remaining = self.types - {transaction_type}
            if not remaining:
                return TypeSelection(frozenset({transaction_type.complement}))
            return TypeSelection(remaining)
        return TypeSelection(self.types | {transaction_type})

    def __contains__(self, transaction_type: object) -> bool:
        return transaction_type in self.types

    @property
    def is_all(self) -> bool:
        return self.types == _ALL_TYPES

    def as_list(self) -> list[str]:
        return sorted(item.value for item in self.types)


@dataclass(frozen=True, slots=True)
class TransactionFilter:
    """Property, type and category constraints for a period query."""

    property_ids: frozenset[int] | None = None
    types: TypeSelection = field(default_factory=TypeSelection)
    categories: frozenset[str] | None = None

    @classmethod
    def build(
        cls,
        *,
        property_ids: Iterable[int] | None = None,
        transaction_types: Iterable[str] | None = None,
        categories: Iterable[str] | None = None,
    ) -> "TransactionFilter":
        ids = frozenset(property_ids) if property_ids else None
        return cls(
            property_ids=ids or None,
            types=TypeSelection.parse(transaction_types),
            categories=resolve_categories(categories),
        )

    def matches(self, record: "TransactionRecord") -> bool:
        if self.property_ids is not None and record.property_id not in self.property_ids:
            return False
        if record.type not in self.types:
            return False
        if self.categories is not None and record.category not in self.categories:
            return False
        return True


__all__ = ["COMPOSITE_CATEGORIES", "TransactionFilter", "TypeSelection", "resolve_categories"]
