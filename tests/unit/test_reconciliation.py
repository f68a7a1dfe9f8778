from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from rentledger.core.errors import NotFoundError, ValidationError
from rentledger.services.reconciliation import AdjustmentDraft, ReconciliationService

TODAY = date(2025, 3, 15)


def _draft(**overrides: object) -> AdjustmentDraft:
    values: dict[str, object] = {
        "adjustment_date": date(2025, 3, 1),
        "amount": Decimal("-12.90"),
        "type": "bank_fee",
        "description": "Tarifa bancária mensal",
    }
    values.update(overrides)
    return AdjustmentDraft(**values)  # type: ignore[arg-type]


def test_create_stores_adjustment(db_session: Session) -> None:
    adjustment = ReconciliationService(db_session).create(_draft(bank_reference=" DOC-123 "), today=TODAY)

    assert adjustment.id is not None
    assert adjustment.amount == Decimal("-12.90")
    assert adjustment.bank_reference == "DOC-123"


def test_custom_type_tags_are_accepted(db_session: Session) -> None:
    adjustment = ReconciliationService(db_session).create(_draft(type="estorno_pix"), today=TODAY)

    assert adjustment.type == "estorno_pix"


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"description": "curta"}, "description"),
        ({"description": "   "}, "description"),
        ({"amount": None}, "amount"),
        ({"amount": "dez"}, "amount"),
        ({"adjustment_date": date(2025, 3, 16)}, "adjustmentDate"),
        ({"type": ""}, "type"),
        ({"bank_reference": "x" * 101}, "bankReference"),
    ],
)
def test_create_rejects_invalid_input(db_session: Session, overrides: dict[str, object], field: str) -> None:
    service = ReconciliationService(db_session)

    with pytest.raises(ValidationError) as excinfo:
        service.create(_draft(**overrides), today=TODAY)

    assert excinfo.value.field == field
    assert service.list() == []


def test_description_of_exactly_ten_characters_is_valid(db_session: Session) -> None:
    adjustment = ReconciliationService(db_session).create(_draft(description="0123456789"), today=TODAY)

    assert adjustment.description == "0123456789"


def test_unknown_references_raise_not_found(db_session: Session) -> None:
    service = ReconciliationService(db_session)

    with pytest.raises(NotFoundError):
        service.create(_draft(account_id=99), today=TODAY)
    with pytest.raises(NotFoundError):
        service.create(_draft(marco_zero_id=42), today=TODAY)


def test_list_is_newest_first_and_filterable(db_session: Session) -> None:
    service = ReconciliationService(db_session)
    older = service.create(_draft(adjustment_date=date(2025, 1, 10)), today=TODAY)
    newer = service.create(_draft(adjustment_date=date(2025, 2, 10)), today=TODAY)

    assert [item.id for item in service.list()] == [newer.id, older.id]
    assert service.list(marco_zero_id=1) == []


def test_delete_removes_and_missing_id_raises(db_session: Session) -> None:
    service = ReconciliationService(db_session)
    adjustment = service.create(_draft(), today=TODAY)

    service.delete(adjustment.id)

    assert service.list() == []
    with pytest.raises(NotFoundError):
        service.delete(adjustment.id)
