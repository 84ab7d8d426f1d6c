"""Operation configuration: one frozen dataclass per asset kind.

Every operation shares the cost structure, seasonality, ramp-up and
ownership fields declared on ``OperationConfig``. Each subclass adds its
capacity, price and monthly utilization drivers and registers itself
under its ``OperationType``. The ``operation_type`` field is the tag the
JSON decoder dispatches on through ``AnyOperationConfig``.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, Optional, Tuple, Type, Union

from pydantic import ConfigDict, Discriminator, Tag, with_config
from pydantic.alias_generators import to_camel

MONTHS_PER_YEAR = 12
FLAT_ZERO_CURVE: Tuple[float, ...] = (0.0,) * MONTHS_PER_YEAR

# camelCase or snake_case keys on input; unknown keys are ignored
INPUT_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OperationType(str, Enum):
    """Asset kinds supported by the operation engines."""
    HOTEL = "HOTEL"
    VILLAS = "VILLAS"
    RESTAURANT = "RESTAURANT"
    BEACH_CLUB = "BEACH_CLUB"
    RACQUET = "RACQUET"
    RETAIL = "RETAIL"
    FLEX = "FLEX"
    WELLNESS = "WELLNESS"
    SENIOR_LIVING = "SENIOR_LIVING"


class OwnershipModel(str, Enum):
    """How the sponsor participates in an asset's economics."""
    BUILD_AND_OPERATE = "BUILD_AND_OPERATE"                # Owns and operates
    BUILD_AND_LEASE_FIXED = "BUILD_AND_LEASE_FIXED"        # Owns, leases at fixed rent
    BUILD_AND_LEASE_VARIABLE = "BUILD_AND_LEASE_VARIABLE"  # Owns, leases at base + variable rent
    CO_INVEST_OPCO = "CO_INVEST_OPCO"                      # Minority stake in the operator


class RentBasis(str, Enum):
    """Basis for variable lease rent."""
    REVENUE = "revenue"
    NOI = "noi"


class RampUpCurve(str, Enum):
    """Shape of the operational ramp-up."""
    LINEAR = "linear"
    S_CURVE = "s-curve"
    EXPONENTIAL = "exponential"
    CUSTOM = "custom"


def _freeze_sequences(instance) -> None:
    """Store list-valued fields as tuples so frozen configs stay immutable."""
    for f in fields(instance):
        value = getattr(instance, f.name)
        if isinstance(value, list):
            object.__setattr__(instance, f.name, tuple(value))


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class LeaseTerms:
    """Lease terms for the lease-based ownership models."""

    base_rent: float = 0.0  # Annual
    variable_rent_pct: float = 0.0
    variable_rent_basis: RentBasis = RentBasis.REVENUE


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class RampUpConfig:
    """Operational ramp-up profile.

    ``start_month`` and the month passed to the ramp are absolute month
    numbers relative to the scenario start. Before ``start_month`` the
    asset produces nothing; after ``start_month + ramp_up_months`` it runs
    at full capacity.
    """

    ramp_up_months: int
    curve: RampUpCurve = RampUpCurve.LINEAR
    start_month: int = 0
    custom_factors: Optional[Tuple[float, ...]] = None
    apply_to_occupancy: bool = True
    apply_to_revenue: bool = False
    id: str = ""
    name: str = ""

    def __post_init__(self):
        _freeze_sequences(self)


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class OperationConfig:
    """Fields shared by every operation kind.

    Subclasses declare an ``operation_type`` field defaulting to their own
    kind and name their monthly driver curve. Percentages are decimals (0.35 = 35%); opex and capex
    percentages apply to total revenue.
    """

    id: str
    name: str = ""
    start_year: int = 2026
    horizon_years: int = 5

    # Opex as % of total revenue
    payroll_pct: float = 0.0
    utilities_pct: float = 0.0
    marketing_pct: float = 0.0
    maintenance_opex_pct: float = 0.0
    other_opex_pct: float = 0.0

    maintenance_capex_pct: float = 0.0

    seasonality_curve: Optional[Tuple[float, ...]] = None
    fixed_payroll: float = 0.0  # Monthly
    fixed_other_expenses: float = 0.0  # Monthly

    ownership_model: OwnershipModel = OwnershipModel.BUILD_AND_OPERATE
    ownership_pct: float = 1.0
    lease_terms: Optional[LeaseTerms] = None
    is_active: bool = True

    ramp_up_config: Optional[RampUpConfig] = None

    curve_field: ClassVar[str] = "occupancy_by_month"
    curve_is_bounded: ClassVar[bool] = True  # False for turnover (turns per day)
    rate_field: ClassVar[Optional[str]] = None  # Nightly/daily rate scaled by the "adr" sensitivity

    def __post_init__(self):
        _freeze_sequences(self)
        kind = getattr(type(self), "operation_type", None)
        if kind is not None and self.operation_type != kind:
            raise ValueError(
                f"{type(self).__name__} has operation_type {kind.value}, got {self.operation_type!r}"
            )

    @property
    def utilization_curve(self) -> Tuple[float, ...]:
        """The 12-month occupancy, utilization or turnover driver."""
        return getattr(self, self.curve_field)


@dataclass(frozen=True)
class HotelConfig(OperationConfig):
    """Hotel: keys x occupancy x ADR, ancillary revenue as % of rooms."""

    operation_type: OperationType = OperationType.HOTEL
    rate_field: ClassVar[Optional[str]] = "avg_daily_rate"

    keys: int = 0
    avg_daily_rate: float = 0.0
    occupancy_by_month: Tuple[float, ...] = FLAT_ZERO_CURVE

    food_revenue_pct_of_rooms: float = 0.0
    beverage_revenue_pct_of_rooms: float = 0.0
    other_revenue_pct_of_rooms: float = 0.0

    food_cogs_pct: float = 0.0
    beverage_cogs_pct: float = 0.0
    commissions_pct: float = 0.0  # Of room revenue


@dataclass(frozen=True)
class VillasConfig(OperationConfig):
    """Villas: units x occupancy x nightly rate, ancillary as % of rental."""

    operation_type: OperationType = OperationType.VILLAS
    rate_field: ClassVar[Optional[str]] = "avg_nightly_rate"

    units: int = 0
    avg_nightly_rate: float = 0.0
    occupancy_by_month: Tuple[float, ...] = FLAT_ZERO_CURVE

    food_revenue_pct_of_rental: float = 0.0
    beverage_revenue_pct_of_rental: float = 0.0
    other_revenue_pct_of_rental: float = 0.0

    food_cogs_pct: float = 0.0
    beverage_cogs_pct: float = 0.0
    commissions_pct: float = 0.0  # Of rental revenue


@dataclass(frozen=True)
class RestaurantConfig(OperationConfig):
    """Restaurant: covers x daily turnover x average check."""

    operation_type: OperationType = OperationType.RESTAURANT
    curve_field: ClassVar[str] = "turnover_by_month"
    curve_is_bounded: ClassVar[bool] = False

    covers: int = 0
    avg_check: float = 0.0
    turnover_by_month: Tuple[float, ...] = FLAT_ZERO_CURVE  # Turns per day

    food_revenue_pct_of_total: float = 0.0
    beverage_revenue_pct_of_total: float = 0.0
    other_revenue_pct_of_total: float = 0.0

    food_cogs_pct: float = 0.0
    beverage_cogs_pct: float = 0.0


@dataclass(frozen=True)
class BeachClubConfig(OperationConfig):
    """Beach club: daily passes plus annual memberships."""

    operation_type: OperationType = OperationType.BEACH_CLUB
    curve_field: ClassVar[str] = "utilization_by_month"

    daily_passes: int = 0
    avg_daily_pass_price: float = 0.0
    memberships: int = 0
    avg_membership_fee: float = 0.0  # Annual
    utilization_by_month: Tuple[float, ...] = FLAT_ZERO_CURVE

    food_revenue_pct_of_total: float = 0.0
    beverage_revenue_pct_of_total: float = 0.0
    other_revenue_pct_of_total: float = 0.0

    food_cogs_pct: float = 0.0
    beverage_cogs_pct: float = 0.0


@dataclass(frozen=True)
class RacquetConfig(OperationConfig):
    """Racquet club: court hours plus annual memberships."""

    operation_type: OperationType = OperationType.RACQUET
    curve_field: ClassVar[str] = "utilization_by_month"

    courts: int = 0
    avg_court_rate: float = 0.0  # Per court-hour
    hours_per_day: float = 0.0
    memberships: int = 0
    avg_membership_fee: float = 0.0  # Annual
    utilization_by_month: Tuple[float, ...] = FLAT_ZERO_CURVE

    food_revenue_pct_of_total: float = 0.0
    beverage_revenue_pct_of_total: float = 0.0
    other_revenue_pct_of_total: float = 0.0

    food_cogs_pct: float = 0.0
    beverage_cogs_pct: float = 0.0


@dataclass(frozen=True)
class RetailConfig(OperationConfig):
    """Retail space leased per square meter. No COGS."""

    operation_type: OperationType = OperationType.RETAIL

    sqm: float = 0.0
    avg_rent_per_sqm: float = 0.0  # Monthly
    occupancy_by_month: Tuple[float, ...] = FLAT_ZERO_CURVE

    rental_revenue_pct_of_total: float = 1.0
    other_revenue_pct_of_total: float = 0.0


@dataclass(frozen=True)
class FlexConfig(OperationConfig):
    """Flexible workspace leased per square meter. No COGS."""

    operation_type: OperationType = OperationType.FLEX

    sqm: float = 0.0
    avg_rent_per_sqm: float = 0.0  # Monthly
    occupancy_by_month: Tuple[float, ...] = FLAT_ZERO_CURVE

    rental_revenue_pct_of_total: float = 1.0
    other_revenue_pct_of_total: float = 0.0


@dataclass(frozen=True)
class WellnessConfig(OperationConfig):
    """Wellness/spa: memberships plus daily passes."""

    operation_type: OperationType = OperationType.WELLNESS
    curve_field: ClassVar[str] = "utilization_by_month"

    memberships: int = 0
    avg_membership_fee: float = 0.0  # Annual
    daily_passes: int = 0
    avg_daily_pass_price: float = 0.0
    utilization_by_month: Tuple[float, ...] = FLAT_ZERO_CURVE

    food_revenue_pct_of_total: float = 0.0
    beverage_revenue_pct_of_total: float = 0.0
    other_revenue_pct_of_total: float = 0.0

    food_cogs_pct: float = 0.0
    beverage_cogs_pct: float = 0.0


@dataclass(frozen=True)
class SeniorLivingConfig(OperationConfig):
    """Senior living: units x occupancy x monthly rate, care as % of rental."""

    operation_type: OperationType = OperationType.SENIOR_LIVING

    units: int = 0
    avg_monthly_rate: float = 0.0
    occupancy_by_month: Tuple[float, ...] = FLAT_ZERO_CURVE

    care_revenue_pct_of_rental: float = 0.0
    food_revenue_pct_of_rental: float = 0.0
    other_revenue_pct_of_rental: float = 0.0

    food_cogs_pct: float = 0.0
    care_cogs_pct: float = 0.0


OPERATION_CONFIG_TYPES: Dict[OperationType, Type[OperationConfig]] = {
    cls.operation_type: cls
    for cls in (
        HotelConfig,
        VillasConfig,
        RestaurantConfig,
        BeachClubConfig,
        RacquetConfig,
        RetailConfig,
        FlexConfig,
        WellnessConfig,
        SeniorLivingConfig,
    )
}


def _operation_tag(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        tag = value.get("operationType", value.get("operation_type"))
    else:
        tag = getattr(value, "operation_type", None)
    return getattr(tag, "value", tag)


# Any concrete operation, decoded by its operation_type tag
AnyOperationConfig = Annotated[
    Union[tuple(Annotated[cls, Tag(kind.value)] for kind, cls in OPERATION_CONFIG_TYPES.items())],
    Discriminator(_operation_tag),
]
