"""Fund types attached to club fund requests: expenditure and income codes."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class FundType(IntEnum):
    # Expenditure
    ADMINISTRATIVE = 0
    EVENT = 1
    PROMOTIONAL = 2
    EQUIPMENT = 3
    TRAINING = 4
    MISCELLANEOUS = 5
    OTHER_EXPENDITURE = 6
    # Income
    COLLEGE = 7
    SPONSORS = 8
    WORKSHOPS = 9
    MEMBERS_CONTRIBUTION = 10
    SERVICES = 11
    OTHER_INCOME = 12


FUND_TYPE_LABELS: dict[FundType, str] = {
    FundType.ADMINISTRATIVE: "Administrative",
    FundType.EVENT: "Event",
    FundType.PROMOTIONAL: "Promotional",
    FundType.EQUIPMENT: "Equipment",
    FundType.TRAINING: "Training",
    FundType.MISCELLANEOUS: "Miscellaneous",
    FundType.OTHER_EXPENDITURE: "Other",
    FundType.COLLEGE: "College",
    FundType.SPONSORS: "Sponsors",
    FundType.WORKSHOPS: "Workshops",
    FundType.MEMBERS_CONTRIBUTION: "Members Contribution",
    FundType.SERVICES: "Services",
    FundType.OTHER_INCOME: "Other",
}

EXPENDITURE_TYPES: frozenset[FundType] = frozenset({
    FundType.ADMINISTRATIVE,
    FundType.EVENT,
    FundType.PROMOTIONAL,
    FundType.EQUIPMENT,
    FundType.TRAINING,
    FundType.MISCELLANEOUS,
    FundType.OTHER_EXPENDITURE,
})

INCOME_TYPES: frozenset[FundType] = frozenset(FundType) - EXPENDITURE_TYPES


def _as_fund_type(code: Any) -> FundType | None:
    if isinstance(code, bool) or not isinstance(code, int):
        return None
    try:
        return FundType(code)
    except ValueError:
        return None


def fund_type_label(code: Any) -> str:
    """Display label for a fund type code; "Unknown" if unrecognized."""
    fund_type = _as_fund_type(code)
    if fund_type is None:
        return "Unknown"
    return FUND_TYPE_LABELS[fund_type]


def is_expenditure(code: Any) -> bool:
    return _as_fund_type(code) in EXPENDITURE_TYPES


def is_income(code: Any) -> bool:
    return _as_fund_type(code) in INCOME_TYPES
