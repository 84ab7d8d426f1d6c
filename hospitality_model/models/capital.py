"""Capital structure inputs: debt tranches and covenants."""

import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Optional, Tuple

from pydantic import AliasChoices, Field, with_config

from .operations import INPUT_CONFIG, _freeze_sequences


class TrancheType(str, Enum):
    """Type of debt instrument."""
    SENIOR = "SENIOR"    # Senior secured / permanent loan
    MEZZ = "MEZZ"        # Junior debt, higher rate
    BRIDGE = "BRIDGE"    # Short-term financing
    OTHER = "OTHER"


class AmortizationType(str, Enum):
    """Repayment profile of a tranche."""
    INTEREST_ONLY = "interest_only"  # Principal repaid at maturity
    MORTGAGE = "mortgage"            # Level amortization over amortization_years
    BULLET = "bullet"                # Single repayment at maturity


class Seniority(str, Enum):
    SENIOR = "senior"
    SUBORDINATE = "subordinate"


class CovenantType(str, Enum):
    """Threshold tested by the covenant monitor."""
    MIN_DSCR = "min_dscr"
    MAX_LTV = "max_ltv"
    MIN_CASH = "min_cash"


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class DebtTrancheConfig:
    """A single debt tranche with its terms.

    ``amount`` is the deprecated name of ``initial_principal``; when given
    it is moved into ``initial_principal`` with a ``DeprecationWarning``.
    """

    id: str
    label: str = ""
    tranche_type: Annotated[
        TrancheType, Field(alias="type", validation_alias=AliasChoices("type", "trancheType"))
    ] = TrancheType.SENIOR
    initial_principal: float = 0.0
    interest_rate: float = 0.0  # Annual
    amortization_type: AmortizationType = AmortizationType.MORTGAGE
    term_years: int = 0
    amortization_years: Optional[int] = None  # Defaults to term_years
    io_years: int = 0
    start_year: int = 0  # Year index when the tranche is drawn

    refinance_at_year: Optional[int] = None
    refinance_amount_pct: float = 1.0  # Share of the balance repaid on refinance

    seniority: Seniority = Seniority.SENIOR
    origination_fee_pct: float = 0.0
    exit_fee_pct: float = 0.0

    amount: Optional[float] = None

    def __post_init__(self):
        if self.amount is not None:
            warnings.warn(
                "DebtTrancheConfig.amount is deprecated; use initial_principal",
                DeprecationWarning,
                stacklevel=3,
            )
            if not self.initial_principal:
                object.__setattr__(self, "initial_principal", self.amount)
            object.__setattr__(self, "amount", None)

    @property
    def effective_amortization_years(self) -> int:
        if self.amortization_years is None:
            return self.term_years
        return self.amortization_years

    @property
    def is_senior(self) -> bool:
        return self.tranche_type == TrancheType.SENIOR or self.seniority == Seniority.SENIOR


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class Covenant:
    """Monthly threshold test with a grace period in months."""

    id: str
    covenant_type: Annotated[
        CovenantType, Field(alias="type", validation_alias=AliasChoices("type", "covenantType"))
    ]
    threshold: float
    grace_period: int = 0
    name: str = ""


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class CapitalStructureConfig:
    """Ordered debt tranches funding ``initial_investment``.

    Equity funds whatever the tranches' net proceeds leave uncovered.
    """

    initial_investment: float
    debt_tranches: Tuple[DebtTrancheConfig, ...] = ()
    covenants: Tuple[Covenant, ...] = field(default_factory=tuple)

    def __post_init__(self):
        _freeze_sequences(self)

    @property
    def total_debt(self) -> float:
        return sum((t.initial_principal for t in self.debt_tranches), 0.0)
