"""Input validation run before any engine executes.

The ``*_issues`` functions collect every problem as a ``ValidationIssue``
so callers can report them together; the ``validate_*`` functions raise
``ConfigurationError`` when any issue is found.
"""

from dataclasses import fields
from typing import List, Sequence

from ..errors import ConfigurationError, ValidationIssue
from .capital import CapitalStructureConfig
from .model import FullModelInput
from .operations import MONTHS_PER_YEAR, OperationConfig, OwnershipModel, RampUpCurve
from .project import InstallmentMethod, ProjectConfig, ProjectScenario
from .waterfall import TierType, WaterfallConfig

MAX_HORIZON_YEARS = 50
OPEX_PCT_FIELDS = ("payroll_pct", "utilities_pct", "marketing_pct", "maintenance_opex_pct", "other_opex_pct")
LEASE_MODELS = (OwnershipModel.BUILD_AND_LEASE_FIXED, OwnershipModel.BUILD_AND_LEASE_VARIABLE)


def _is_pct_field(name: str) -> bool:
    return name.endswith("_pct") or "_pct_of_" in name


def _check_range(issues, path, value, low, high, code="out_of_range"):
    if value is None:
        return
    if value < low or value > high:
        issues.append(ValidationIssue(path, f"must be between {low} and {high}, got {value}", code))


def _check_monthly_curve(issues, path, values, bounded):
    if values is None:
        return
    if len(values) != MONTHS_PER_YEAR:
        issues.append(ValidationIssue(path, f"must contain 12 monthly values, got {len(values)}", "invalid_length"))
    for month, value in enumerate(values):
        if bounded and not 0.0 <= value <= 1.0:
            issues.append(ValidationIssue(f"{path}[{month}]", f"must be between 0 and 1, got {value}", "out_of_range"))
        elif value < 0:
            issues.append(ValidationIssue(f"{path}[{month}]", f"must be non-negative, got {value}", "out_of_range"))


def operation_issues(config: OperationConfig, path: str = "operation") -> List[ValidationIssue]:
    """Collect every problem with one operation config."""
    issues = []

    if not config.id:
        issues.append(ValidationIssue(f"{path}.id", "is required", "required"))
    if not 1 <= config.horizon_years <= MAX_HORIZON_YEARS:
        issues.append(ValidationIssue(
            f"{path}.horizon_years",
            f"must be between 1 and {MAX_HORIZON_YEARS}, got {config.horizon_years}",
            "out_of_range",
        ))

    _check_monthly_curve(issues, f"{path}.{config.curve_field}", config.utilization_curve, config.curve_is_bounded)
    _check_monthly_curve(issues, f"{path}.seasonality_curve", config.seasonality_curve, bounded=False)

    for f in fields(config):
        value = getattr(config, f.name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or f.name == "start_year":
            continue
        if _is_pct_field(f.name):
            _check_range(issues, f"{path}.{f.name}", value, 0.0, 1.0)
        elif value < 0:
            issues.append(ValidationIssue(f"{path}.{f.name}", f"must be non-negative, got {value}", "out_of_range"))

    opex_sum = sum(getattr(config, name) for name in OPEX_PCT_FIELDS)
    if opex_sum > 1.0:
        issues.append(ValidationIssue(
            f"{path}.payroll_pct",
            f"operating expense percentages sum to {opex_sum:.4f}, above 100% of revenue",
            "opex_exceeds_revenue",
        ))

    if config.ownership_model in LEASE_MODELS and config.lease_terms is None:
        issues.append(ValidationIssue(
            f"{path}.lease_terms",
            f"required for ownership model {config.ownership_model.value}",
            "required",
        ))
    if config.lease_terms is not None:
        _check_range(issues, f"{path}.lease_terms.variable_rent_pct", config.lease_terms.variable_rent_pct, 0.0, 1.0)
        if config.lease_terms.base_rent < 0:
            issues.append(ValidationIssue(f"{path}.lease_terms.base_rent", "must be non-negative", "out_of_range"))

    ramp = config.ramp_up_config
    if ramp is not None:
        if ramp.ramp_up_months < 0:
            issues.append(ValidationIssue(f"{path}.ramp_up_config.ramp_up_months", "must be non-negative", "out_of_range"))
        if ramp.curve == RampUpCurve.CUSTOM and not ramp.custom_factors:
            issues.append(ValidationIssue(
                f"{path}.ramp_up_config.custom_factors", "required for a custom ramp-up curve", "required"
            ))

    return issues


def scenario_issues(scenario: ProjectScenario) -> List[ValidationIssue]:
    issues = []
    if not scenario.id:
        issues.append(ValidationIssue("scenario.id", "is required", "required"))
    if not 1 <= scenario.horizon_years <= MAX_HORIZON_YEARS:
        issues.append(ValidationIssue(
            "scenario.horizon_years",
            f"must be between 1 and {MAX_HORIZON_YEARS}, got {scenario.horizon_years}",
            "out_of_range",
        ))
    if not scenario.operations:
        issues.append(ValidationIssue("scenario.operations", "must contain at least one operation", "required"))

    seen = set()
    for i, op in enumerate(scenario.operations):
        if op.id in seen:
            issues.append(ValidationIssue(f"scenario.operations[{i}].id", f"duplicate id {op.id!r}", "duplicate"))
        seen.add(op.id)
        issues.extend(operation_issues(op, f"scenario.operations[{i}]"))
    return issues


def project_issues(config: ProjectConfig) -> List[ValidationIssue]:
    issues = []
    _check_range(issues, "project_config.discount_rate", config.discount_rate, 0.0, 1.0)
    _check_range(issues, "project_config.terminal_growth_rate", config.terminal_growth_rate, -0.1, 0.1)
    _check_range(issues, "project_config.working_capital_percentage", config.working_capital_percentage, 0.0, 1.0)
    _check_range(issues, "project_config.tax_rate", config.tax_rate, 0.0, 1.0)
    if config.discount_rate <= config.terminal_growth_rate:
        issues.append(ValidationIssue(
            "project_config.discount_rate",
            "must exceed terminal_growth_rate for a finite terminal value",
            "discount_below_growth",
        ))
    if config.initial_investment < 0:
        issues.append(ValidationIssue("project_config.initial_investment", "must be non-negative", "out_of_range"))

    for i, land in enumerate(config.land):
        path = f"project_config.land[{i}]"
        if land.total_cost < 0:
            issues.append(ValidationIssue(f"{path}.total_cost", "must be non-negative", "out_of_range"))
        if land.down_payment > land.total_cost:
            issues.append(ValidationIssue(f"{path}.down_payment", "exceeds total_cost", "out_of_range"))
        _check_range(issues, f"{path}.barter_value", land.barter_value, 0.0, 1.0)
        if land.installment_method == InstallmentMethod.CUSTOM and not land.installments:
            issues.append(ValidationIssue(f"{path}.installments", "required for custom installments", "required"))

    construction = config.construction
    if construction is not None:
        if construction.total_budget <= 0:
            issues.append(ValidationIssue("project_config.construction.total_budget", "must be positive", "out_of_range"))
        if construction.duration_months <= 0:
            issues.append(ValidationIssue(
                "project_config.construction.duration_months", "must be positive", "out_of_range"
            ))
    return issues


def capital_issues(config: CapitalStructureConfig) -> List[ValidationIssue]:
    issues = []
    if config.initial_investment < 0:
        issues.append(ValidationIssue("capital_config.initial_investment", "must be non-negative", "out_of_range"))

    seen = set()
    for i, tranche in enumerate(config.debt_tranches):
        path = f"capital_config.debt_tranches[{i}]"
        if not tranche.id:
            issues.append(ValidationIssue(f"{path}.id", "is required", "required"))
        elif tranche.id in seen:
            issues.append(ValidationIssue(f"{path}.id", f"duplicate id {tranche.id!r}", "duplicate"))
        seen.add(tranche.id)

        if tranche.initial_principal < 0:
            issues.append(ValidationIssue(f"{path}.initial_principal", "must be non-negative", "out_of_range"))
        _check_range(issues, f"{path}.interest_rate", tranche.interest_rate, 0.0, 1.0)
        _check_range(issues, f"{path}.term_years", tranche.term_years, 1, MAX_HORIZON_YEARS)
        if tranche.amortization_years is not None:
            _check_range(issues, f"{path}.amortization_years", tranche.amortization_years, 1, MAX_HORIZON_YEARS)
        _check_range(issues, f"{path}.io_years", tranche.io_years, 0, MAX_HORIZON_YEARS)
        _check_range(issues, f"{path}.start_year", tranche.start_year, 0, MAX_HORIZON_YEARS)
        _check_range(issues, f"{path}.refinance_amount_pct", tranche.refinance_amount_pct, 0.0, 1.0)
        _check_range(issues, f"{path}.origination_fee_pct", tranche.origination_fee_pct, 0.0, 1.0)
        _check_range(issues, f"{path}.exit_fee_pct", tranche.exit_fee_pct, 0.0, 1.0)

    total_debt = config.total_debt
    if config.initial_investment > 0 and total_debt > config.initial_investment:
        issues.append(ValidationIssue(
            "capital_config.debt_tranches",
            f"implied LTV {total_debt / config.initial_investment:.4f} exceeds 1",
            "ltv_above_one",
        ))

    for i, covenant in enumerate(config.covenants):
        if covenant.grace_period < 0:
            issues.append(ValidationIssue(
                f"capital_config.covenants[{i}].grace_period", "must be non-negative", "out_of_range"
            ))
    return issues


def waterfall_issues(config: WaterfallConfig) -> List[ValidationIssue]:
    issues = []
    if not config.equity_classes:
        issues.append(ValidationIssue(
            "waterfall_config.equity_classes", "must contain at least one equity class", "required"
        ))
    for i, equity_class in enumerate(config.equity_classes):
        path = f"waterfall_config.equity_classes[{i}]"
        _check_range(issues, f"{path}.contribution_pct", equity_class.contribution_pct, 0.0, 1.0)
        _check_range(issues, f"{path}.distribution_pct", equity_class.distribution_pct, 0.0, 1.0)

    class_ids = set(config.class_ids())
    for i, tier in enumerate(config.tiers):
        path = f"waterfall_config.tiers[{i}]"
        for class_id, split in tier.distribution_splits.items():
            if class_id not in class_ids:
                issues.append(ValidationIssue(
                    f"{path}.distribution_splits", f"unknown equity class {class_id!r}", "unknown_class"
                ))
            _check_range(issues, f"{path}.distribution_splits.{class_id}", split, 0.0, 1.0)
        if tier.tier_type == TierType.PREFERRED_RETURN and tier.hurdle_irr is None:
            issues.append(ValidationIssue(f"{path}.hurdle_irr", "required for a preferred return tier", "required"))
        _check_range(issues, f"{path}.catch_up_rate", tier.catch_up_rate, 0.0, 1.0)
    return issues


def investment_issues(project_config: ProjectConfig, capital_config: CapitalStructureConfig) -> List[ValidationIssue]:
    """The capital stack must fund the same investment the project values.

    Debt sizing, LTV and the owner Year 0 flow read the capital figure while
    the unlevered cash flows read the project figure.
    """
    if project_config.initial_investment != capital_config.initial_investment:
        return [ValidationIssue(
            "capital_config.initial_investment",
            f"must equal project_config.initial_investment ({project_config.initial_investment}), "
            f"got {capital_config.initial_investment}",
            "investment_mismatch",
        )]
    return []


def _raise_if_any(issues: Sequence[ValidationIssue]) -> None:
    if issues:
        raise ConfigurationError(issues)


def validate_operation(config: OperationConfig) -> None:
    """Raise ``ConfigurationError`` if the operation config is invalid."""
    _raise_if_any(operation_issues(config))


def validate_scenario(scenario: ProjectScenario) -> None:
    _raise_if_any(scenario_issues(scenario))


def validate_model_input(model_input: FullModelInput) -> None:
    """Validate every section of a model input, reporting all issues at once."""
    _raise_if_any(
        scenario_issues(model_input.scenario)
        + project_issues(model_input.project_config)
        + capital_issues(model_input.capital_config)
        + waterfall_issues(model_input.waterfall_config)
        + investment_issues(model_input.project_config, model_input.capital_config)
    )
