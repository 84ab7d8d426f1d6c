"""Portfolio view: revenue, NOI and value by operation type.

Works from a ``FullModelOutput`` without re-running any stage. Each
operation's annual P&L is taken through the sponsor view, summed over the
horizon and added to its operation type. Enterprise value is then split
across types in proportion to their share of total sponsor NOI.
"""

import logging
from dataclasses import dataclass
from typing import Dict

from ..calculations.operations import apply_sponsor_view
from ..models.operations import OperationType
from ..pipeline.orchestrator import FullModelOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortfolioMetrics:
    """Horizon totals for one operation type."""

    revenue: float = 0.0
    noi: float = 0.0
    valuation: float = 0.0  # Share of enterprise value


def aggregate_by_operation_type(output: FullModelOutput) -> Dict[OperationType, PortfolioMetrics]:
    """Sponsor revenue, NOI and allocated valuation for every operation type.

    Every ``OperationType`` is present; types with no operations report
    zeros. A type's valuation is ``enterprise_value * type_noi / total_noi``
    and stays zero when either NOI is zero. A negative total NOI still
    allocates proportionally.
    """
    revenue = {kind: 0.0 for kind in OperationType}
    noi = {kind: 0.0 for kind in OperationType}

    configs = output.model_input.scenario.operations
    for config, operation in zip(configs, output.scenario.operations):
        for annual in operation.annual_pnl:
            sponsor = apply_sponsor_view(annual, config)
            revenue[operation.operation_type] += sponsor.revenue_total
            noi[operation.operation_type] += sponsor.noi

    total_noi = sum(noi.values())
    enterprise_value = output.project.dcf_valuation.enterprise_value
    logger.debug("Allocating enterprise value %.2f over total NOI %.2f", enterprise_value, total_noi)

    result = {}
    for kind in OperationType:
        valuation = 0.0
        if total_noi != 0 and noi[kind] != 0:
            valuation = enterprise_value * noi[kind] / total_noi
        result[kind] = PortfolioMetrics(revenue=revenue[kind], noi=noi[kind], valuation=valuation)
    return result
