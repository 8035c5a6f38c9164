"""
Module: books_engines.cash_flow
Responsibility:
    Classify bank transactions into cash flow activities.  The classifier
    is pluggable: the Cash Flow builder depends only on the
    ``CashFlowClassifier`` protocol, so the keyword heuristic can later be
    replaced by account tags without touching the builder.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Every transaction lands in exactly one activity.
    - Keyword groups are checked in a fixed order (operating, financing,
      investing); the first group with a match wins.  Unmatched
      transactions default to operating.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from books_kernel.domain.ledger import LedgerRow


class CashFlowActivity(str, Enum):
    """Cash flow statement section."""

    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


ACTIVITY_ORDER: tuple[CashFlowActivity, ...] = (
    CashFlowActivity.OPERATING,
    CashFlowActivity.INVESTING,
    CashFlowActivity.FINANCING,
)


class CashFlowClassifier(Protocol):
    """Assigns a bank transaction to a cash flow activity."""

    def classify(self, row: LedgerRow) -> CashFlowActivity: ...


@dataclass(frozen=True)
class KeywordCashFlowClassifier:
    """
    Case-insensitive substring match of the transaction description.

    This is a fuzzy heuristic, not a ledger-accurate categorisation.
    """

    operating_keywords: Sequence[str] = ("invoice", "payment")
    financing_keywords: Sequence[str] = ("loan", "investment")
    investing_keywords: Sequence[str] = ("equipment", "asset")
    default_activity: CashFlowActivity = CashFlowActivity.OPERATING

    def _rules(self) -> tuple[tuple[CashFlowActivity, Sequence[str]], ...]:
        return (
            (CashFlowActivity.OPERATING, self.operating_keywords),
            (CashFlowActivity.FINANCING, self.financing_keywords),
            (CashFlowActivity.INVESTING, self.investing_keywords),
        )

    def classify(self, row: LedgerRow) -> CashFlowActivity:
        text = (row.description or "").lower()
        if text:
            for activity, keywords in self._rules():
                if any(keyword.lower() in text for keyword in keywords):
                    return activity
        return self.default_activity
