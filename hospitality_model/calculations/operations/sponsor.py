"""Sponsor view of asset P&L under each ownership model.

Operation engines report what the asset earns; the sponsor consolidates
only what it receives. Owner-operated and co-invested assets contribute
their ownership share of every line. Leased assets contribute rent,
carried on the room revenue line, as revenue, GOP, EBITDA, NOI and cash
flow with no owner costs.
"""

from dataclasses import replace
from typing import List, TypeVar

from ...models.operations import OperationConfig, OwnershipModel, RentBasis
from ...models.pnl import PnlLines

P = TypeVar("P", bound=PnlLines)


def _rent_record(pnl: P, rent: float) -> P:
    zeroed = pnl.zeroed()
    return replace(
        zeroed,
        room_revenue=rent,
        gross_operating_profit=rent,
        ebitda=rent,
        noi=rent,
        cash_flow=rent,
    )


def apply_sponsor_view(pnl: P, config: OperationConfig, periods_per_year: int = 1) -> P:
    """Transform one period of asset P&L into the sponsor's share.

    Args:
        pnl: Monthly or annual asset P&L.
        config: The operation's config (ownership model, lease terms).
        periods_per_year: 12 for monthly records, 1 for annual; divides
            the annual base rent.

    Returns:
        A new record of the same type.
    """
    if not config.is_active:
        return pnl.zeroed()

    model = config.ownership_model
    if model in (OwnershipModel.BUILD_AND_OPERATE, OwnershipModel.CO_INVEST_OPCO):
        return pnl.scaled(config.ownership_pct)

    lease = config.lease_terms
    base_rent = (lease.base_rent if lease else 0.0) / periods_per_year

    if model == OwnershipModel.BUILD_AND_LEASE_FIXED:
        return _rent_record(pnl, base_rent)

    # BUILD_AND_LEASE_VARIABLE
    variable_pct = lease.variable_rent_pct if lease else 0.0
    basis = pnl.noi if lease and lease.variable_rent_basis == RentBasis.NOI else pnl.revenue_total
    return _rent_record(pnl, base_rent + basis * variable_pct)


def sponsor_monthly(monthly: List[P], config: OperationConfig) -> List[P]:
    """Sponsor view of every month; annual totals are the sums of these months."""
    return [apply_sponsor_view(m, config, periods_per_year=12) for m in monthly]
