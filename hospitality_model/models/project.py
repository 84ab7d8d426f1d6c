"""Project-level inputs: the scenario of operations and the valuation config."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from pydantic import with_config

from .operations import INPUT_CONFIG, AnyOperationConfig, _freeze_sequences


class ConstructionCurve(str, Enum):
    """Spending pattern for construction drawdowns."""
    LINEAR = "linear"
    S_CURVE = "s-curve"
    FRONT_LOADED = "front-loaded"
    BACK_LOADED = "back-loaded"


class InstallmentMethod(str, Enum):
    """How the land balance after the down payment is paid."""
    EQUAL = "equal"    # Equal monthly installments until month 0
    CUSTOM = "custom"  # Explicit installment schedule


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class ProjectScenario:
    """A portfolio of operations modeled over a common horizon."""

    id: str
    name: str
    start_year: int
    horizon_years: int
    operations: Tuple[AnyOperationConfig, ...] = ()

    def __post_init__(self):
        _freeze_sequences(self)


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class LandInstallment:
    """One scheduled land payment."""

    month: int  # Relative to project start, may be negative
    amount: float
    description: str = ""


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class LandConfig:
    """Land acquisition with a down payment and installments.

    Months are relative to project start; negative months fall before
    Year 0 and are funded in the Year 0 outflow.
    """

    id: str
    name: str
    total_cost: float
    acquisition_month: int = 0
    down_payment: float = 0.0
    down_payment_month: int = 0
    installment_method: InstallmentMethod = InstallmentMethod.EQUAL
    installments: Tuple[LandInstallment, ...] = ()
    barter_value: float = 0.0  # Fraction of total_cost settled in kind
    barter_month: Optional[int] = None

    def __post_init__(self):
        _freeze_sequences(self)


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class ConstructionConfig:
    """Construction budget spent along a curve."""

    id: str
    name: str
    total_budget: float
    start_month: int = 0
    duration_months: int = 12
    curve_type: ConstructionCurve = ConstructionCurve.S_CURVE


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class ProjectConfig:
    """Valuation assumptions.

    ``discount_rate`` must exceed ``terminal_growth_rate`` for the
    terminal value to be finite.
    """

    discount_rate: float
    terminal_growth_rate: float
    initial_investment: float
    working_capital_percentage: float = 0.0  # Of annual revenue
    tax_rate: float = 0.0  # For the WACC debt shield

    land: Tuple[LandConfig, ...] = field(default_factory=tuple)
    construction: Optional[ConstructionConfig] = None

    def __post_init__(self):
        _freeze_sequences(self)

    @property
    def has_development_flows(self) -> bool:
        return bool(self.land) or self.construction is not None
