"""Data models for the hospitality financial model."""

from .operations import (
    MONTHS_PER_YEAR,
    OperationType,
    OwnershipModel,
    RentBasis,
    RampUpCurve,
    LeaseTerms,
    RampUpConfig,
    OperationConfig,
    HotelConfig,
    VillasConfig,
    RestaurantConfig,
    BeachClubConfig,
    RacquetConfig,
    RetailConfig,
    FlexConfig,
    WellnessConfig,
    SeniorLivingConfig,
    OPERATION_CONFIG_TYPES,
    AnyOperationConfig,
    INPUT_CONFIG,
)
from .pnl import (
    PNL_LINES,
    PnlLines,
    MonthlyPnl,
    AnnualPnl,
    ConsolidatedMonthlyPnl,
    ConsolidatedAnnualPnl,
    sum_lines,
    aggregate_annual,
)
from .project import (
    ConstructionCurve,
    InstallmentMethod,
    ProjectScenario,
    LandInstallment,
    LandConfig,
    ConstructionConfig,
    ProjectConfig,
)
from .capital import (
    TrancheType,
    AmortizationType,
    Seniority,
    CovenantType,
    DebtTrancheConfig,
    Covenant,
    CapitalStructureConfig,
)
from .waterfall import (
    TierType,
    ClawbackMethod,
    EquityClass,
    WaterfallTier,
    WaterfallConfig,
)
from .model import (
    FullModelInput,
    NamedScenario,
)
from .serialization import (
    to_dict,
    from_dict,
    dumps_model_input,
    loads_model_input,
    stable_hash,
)
from .validation import (
    operation_issues,
    scenario_issues,
    validate_operation,
    validate_scenario,
    validate_model_input,
)

__all__ = [
    "MONTHS_PER_YEAR",
    "OperationType",
    "OwnershipModel",
    "RentBasis",
    "RampUpCurve",
    "LeaseTerms",
    "RampUpConfig",
    "OperationConfig",
    "HotelConfig",
    "VillasConfig",
    "RestaurantConfig",
    "BeachClubConfig",
    "RacquetConfig",
    "RetailConfig",
    "FlexConfig",
    "WellnessConfig",
    "SeniorLivingConfig",
    "OPERATION_CONFIG_TYPES",
    "AnyOperationConfig",
    "INPUT_CONFIG",
    "PNL_LINES",
    "PnlLines",
    "MonthlyPnl",
    "AnnualPnl",
    "ConsolidatedMonthlyPnl",
    "ConsolidatedAnnualPnl",
    "sum_lines",
    "aggregate_annual",
    "ConstructionCurve",
    "InstallmentMethod",
    "ProjectScenario",
    "LandInstallment",
    "LandConfig",
    "ConstructionConfig",
    "ProjectConfig",
    "TrancheType",
    "AmortizationType",
    "Seniority",
    "CovenantType",
    "DebtTrancheConfig",
    "Covenant",
    "CapitalStructureConfig",
    "TierType",
    "ClawbackMethod",
    "EquityClass",
    "WaterfallTier",
    "WaterfallConfig",
    "FullModelInput",
    "NamedScenario",
    "to_dict",
    "from_dict",
    "dumps_model_input",
    "loads_model_input",
    "stable_hash",
    "operation_issues",
    "scenario_issues",
    "validate_operation",
    "validate_scenario",
    "validate_model_input",
]
