from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from rentledger.core.errors import ValidationError
from rentledger.models import TransactionType
from rentledger.services.filters import TransactionFilter, TypeSelection, resolve_categories
from rentledger.services.store import TransactionRecord


def _record(**overrides: object) -> TransactionRecord:
    values: dict[str, object] = {
        "id": 1,
        "property_id": 1,
        "property_name": "Sevilha",
        "type": TransactionType.REVENUE,
        "category": "rent",
        "amount": Decimal("100.00"),
        "date": date(2025, 1, 5),
    }
    values.update(overrides)
    return TransactionRecord(**values)  # type: ignore[arg-type]


def test_toggling_off_the_last_type_selects_the_other() -> None:
    only_revenue = TypeSelection(frozenset({TransactionType.REVENUE}))

    toggled = only_revenue.toggle(TransactionType.REVENUE)

    assert toggled.types == frozenset({TransactionType.EXPENSE})


def test_toggle_sequence_never_yields_an_empty_selection() -> None:
    selection = TypeSelection()
    for item in ["revenue", "expense", "expense", "revenue", "revenue", "expense"]:
        selection = selection.toggle(item)
        assert selection.types


def test_empty_selection_is_rejected() -> None:
    with pytest.raises(ValidationError):
        TypeSelection(frozenset())


def test_parse_defaults_to_both_types() -> None:
    assert TypeSelection.parse([]).is_all
    assert TypeSelection.parse(None).is_all
    assert TypeSelection.parse(["expense"]).as_list() == ["expense"]
    with pytest.raises(ValidationError):
        TypeSelection.parse(["transfer"])


def test_composite_categories_expand() -> None:
    assert resolve_categories(["aluguel_total"]) == frozenset({"rent", "Rent", "other"})
    assert resolve_categories(["aluguel_simples", "cleaning"]) == frozenset({"rent", "Rent", "cleaning"})
    assert resolve_categories([]) is None


def test_filter_matches_properties_types_and_categories() -> None:
    flt = TransactionFilter.build(
        property_ids=[1],
        transaction_types=["revenue"],
        categories=["outras_receitas"],
    )

    assert flt.matches(_record(category="other"))
    assert not flt.matches(_record(category="rent"))
    assert not flt.matches(_record(category="other", property_id=2))
    assert not flt.matches(_record(category="other", type=TransactionType.EXPENSE))
