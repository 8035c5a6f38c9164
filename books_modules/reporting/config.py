"""
Reporting Configuration Schema.

Defines the reserved account codes the statement builders key on and the
report formatting options.  Defaults follow the standard small-business
chart of accounts (11xx bank accounts, 1300 receivables, 2000 payables,
3100 retained earnings).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Self

from books_engines.cash_flow import KeywordCashFlowClassifier
from books_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")


@dataclass
class AccountClassification:
    """
    Reserved account codes used by the Balance Sheet builder.

    Prefix matching: an account is a bank account if its code starts with
    any of ``bank_account_prefixes``.
    """

    bank_account_prefixes: tuple[str, ...] = ("11",)
    receivable_account_code: str = "1300"
    payable_account_code: str = "2000"
    retained_earnings_code: str = "3100"

    def __post_init__(self):
        self.bank_account_prefixes = tuple(self.bank_account_prefixes)
        if not self.bank_account_prefixes or not all(self.bank_account_prefixes):
            raise ValueError("bank_account_prefixes must be non-empty strings")
        for name in (
            "receivable_account_code",
            "payable_account_code",
            "retained_earnings_code",
        ):
            if not getattr(self, name):
                raise ValueError(f"{name} cannot be empty")

    def matches_prefix(self, code: str, prefixes: tuple[str, ...]) -> bool:
        """Check if an account code matches any of the given prefixes."""
        return any(code.startswith(p) for p in prefixes)

    def is_bank_account(self, code: str) -> bool:
        return self.matches_prefix(code, self.bank_account_prefixes)


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls reserved account codes, which document statuses count as open,
    cash flow keywords and report formatting.
    """

    # Classification rules
    classification: AccountClassification = field(
        default_factory=AccountClassification,
    )

    # Default currency for reports
    default_currency: str = "USD"

    # Entity name shown on reports
    entity_name: str = "Company"

    # Fractional digits of the profit margin percentage
    display_precision: int = 2

    # Whether to include accounts with zero balance in reports
    include_zero_balances: bool = True

    # Whether the balance sheet lists inactive accounts
    include_inactive: bool = False

    # Statuses that make a document outstanding
    receivable_open_statuses: tuple[str, ...] = ("sent", "overdue")
    payable_open_statuses: tuple[str, ...] = ("approved", "overdue")

    # Cash flow keyword heuristic, checked operating -> financing -> investing
    operating_keywords: tuple[str, ...] = ("invoice", "payment")
    financing_keywords: tuple[str, ...] = ("loan", "investment")
    investing_keywords: tuple[str, ...] = ("equipment", "asset")

    # Run books_kernel.invariants checks on every built report
    verify_invariants: bool = False

    def __post_init__(self):
        if self.display_precision < 0:
            raise ValueError("display_precision cannot be negative")
        if len(self.default_currency) != 3:
            raise ValueError("default_currency must be a 3-letter ISO 4217 code")
        for name in (
            "receivable_open_statuses",
            "payable_open_statuses",
            "operating_keywords",
            "financing_keywords",
            "investing_keywords",
        ):
            values = tuple(getattr(self, name))
            if any(not isinstance(v, str) or not v.strip() for v in values):
                raise ValueError(f"{name} must contain non-empty strings")
            setattr(self, name, values)
        if "draft" in self.receivable_open_statuses + self.payable_open_statuses:
            raise ValueError("draft documents can never be outstanding")

    def cash_flow_classifier(self) -> KeywordCashFlowClassifier:
        """Keyword classifier built from the configured term lists."""
        return KeywordCashFlowClassifier(
            operating_keywords=self.operating_keywords,
            financing_keywords=self.financing_keywords,
            investing_keywords=self.investing_keywords,
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary.  The input is not mutated."""
        data = dict(data)
        if "classification" in data and isinstance(data["classification"], dict):
            data["classification"] = AccountClassification(**data["classification"])
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, tuple):
                result[key] = list(value)
        result["classification"] = {
            k: list(v) if isinstance(v, tuple) else v
            for k, v in result["classification"].items()
        }
        return result
