"""Equity waterfall: allocate owner levered cash flows across equity classes.

Single-tier mode splits capital calls by contribution % and distributions by
distribution %. Multi-tier mode runs a state machine per period:

1. Return of capital, pro rata to unreturned capital.
2. Preferred return, accrued each period on the opening balance of
   unreturned capital (plus unpaid pref when compounding).
3. Catch-up to the promote class until it holds its target share of profit.
4. Promote split of whatever remains.

An optional clawback at the final period returns promote the promote class
took beyond what a whole-life liquidation of the same cash entitles it to.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.waterfall import ClawbackMethod, EquityClass, TierType, WaterfallConfig, WaterfallTier
from .financial import equity_multiple, irr

logger = logging.getLogger(__name__)

INVARIANT_TOLERANCE = 0.01
DEFAULT_OWNER_CLASS = EquityClass(id="owner", name="Owner", contribution_pct=1.0, distribution_pct=1.0)


@dataclass
class PartnerResult:
    partner_id: str
    name: str
    cash_flows: List[float]
    cumulative_cash_flows: List[float]
    irr: Optional[float]
    moic: Optional[float]  # None when the partner never contributed


@dataclass
class WaterfallRow:
    """One period of the allocation.

    Escrow rows carry a clawback booked outside the period flows: the owner
    flow is zero and the partner amounts sum to zero.
    """

    year_index: int
    owner_cash_flow: float
    partner_distributions: Dict[str, float]
    is_escrow: bool = False


@dataclass
class ClawbackAdjustment:
    """Promote returned by the promote class at the final period.

    ``adjustments`` maps class id to its signed change; it sums to zero.
    """

    tier_id: str
    method: ClawbackMethod
    year_index: int
    amount: float
    adjustments: Dict[str, float]


@dataclass
class WaterfallResult:
    owner_cash_flows: List[float]
    partners: List[PartnerResult]
    rows: List[WaterfallRow]
    clawbacks: List[ClawbackAdjustment] = field(default_factory=list)

    def partner(self, partner_id: str) -> PartnerResult:
        for p in self.partners:
            if p.partner_id == partner_id:
                return p
        raise KeyError(partner_id)


@dataclass
class _State:
    """Per-class running balances for one waterfall run."""

    ids: List[str]
    unreturned: Dict[str, float]
    profit: Dict[str, float]
    pref_due: Dict[str, Dict[str, float]]  # tier id -> class id -> unpaid pref
    pref_accrued: Dict[str, Dict[str, float]]  # tier id -> class id -> lifetime accrual

    @classmethod
    def start(cls, ids: List[str], tiers: Sequence[WaterfallTier]) -> "_State":
        pref_tiers = [t.id for t in tiers if t.tier_type == TierType.PREFERRED_RETURN]
        return cls(
            ids=ids,
            unreturned={i: 0.0 for i in ids},
            profit={i: 0.0 for i in ids},
            pref_due={t: {i: 0.0 for i in ids} for t in pref_tiers},
            pref_accrued={t: {i: 0.0 for i in ids} for t in pref_tiers},
        )


def _normalize(weights: Sequence[float]) -> List[float]:
    total = sum(weights)
    if abs(total) < 1e-10:
        return [1.0 / len(weights)] * len(weights)
    return [w / total for w in weights]


def _allocate(amount: float, ids: Sequence[str], weights: Sequence[float]) -> Dict[str, float]:
    """Split ``amount`` by normalized weights; the last class takes the remainder."""
    pcts = _normalize(weights)
    shares = {}
    running = 0.0
    for class_id, pct in zip(ids[:-1], pcts[:-1]):
        shares[class_id] = amount * pct
        running += shares[class_id]
    shares[ids[-1]] = amount - running
    return shares


def _promote_class(classes: Sequence[EquityClass]) -> str:
    """The class with the smallest contribution share (the last one on ties)."""
    promote = classes[-1]
    for c in classes:
        if c.contribution_pct < promote.contribution_pct:
            promote = c
    return promote.id


def _accrue_pref(state: _State, tiers: Sequence[WaterfallTier]) -> None:
    for tier in tiers:
        if tier.tier_type != TierType.PREFERRED_RETURN:
            continue
        if tier.hurdle_irr is None:
            raise ValueError(f"Preferred return tier {tier.id} requires hurdle_irr")
        due = state.pref_due[tier.id]
        for class_id in state.ids:
            basis = state.unreturned[class_id] + (due[class_id] if tier.compound_pref else 0.0)
            accrual = max(0.0, basis) * tier.hurdle_irr
            due[class_id] += accrual
            state.pref_accrued[tier.id][class_id] += accrual


def _catch_up(
    tier: WaterfallTier,
    remaining: float,
    state: _State,
    classes: Sequence[EquityClass],
    promote_id: str,
    paid: Dict[str, float],
) -> float:
    """Pay the promote class until it holds its target share of profit. Returns cash used."""
    targets = tier.catch_up_target_split or tier.distribution_splits
    target = targets.get(promote_id, 0.0)
    rate = tier.catch_up_rate if tier.catch_up_rate is not None else 1.0
    if target <= 0 or rate <= target:
        if target > 0:
            logger.warning("Catch-up rate %.2f cannot reach target split %.2f in tier %s", rate, target, tier.id)
        return 0.0

    total_profit = sum(state.profit.values())
    # Solve (promote + rate * x) == target * (total + x) for x
    needed = (target * total_profit - state.profit[promote_id]) / (rate - target)
    amount = min(remaining, max(0.0, needed))
    if amount <= 0:
        return 0.0

    others = [c for c in classes if c.id != promote_id]
    shares = {promote_id: amount * rate}
    if others:
        shares.update(_allocate(amount - shares[promote_id], [c.id for c in others], [c.contribution_pct for c in others]))
    else:
        shares[promote_id] = amount
    for class_id, share in shares.items():
        paid[class_id] += share
        state.profit[class_id] += share
    return amount


def _distribute(
    amount: float,
    tiers: Sequence[WaterfallTier],
    state: _State,
    classes: Sequence[EquityClass],
    promote_id: str,
) -> Dict[str, float]:
    """Run one positive distribution through the tiers in order."""
    ids = state.ids
    paid = {i: 0.0 for i in ids}
    remaining = amount

    for tier in tiers:
        if remaining <= 0:
            break

        if tier.tier_type == TierType.RETURN_OF_CAPITAL:
            total = sum(max(0.0, state.unreturned[i]) for i in ids)
            if total > 0:
                returned = 0.0
                for class_id in ids:
                    owed = max(0.0, state.unreturned[class_id])
                    share = min(remaining * owed / total, owed)
                    paid[class_id] += share
                    state.unreturned[class_id] -= share
                    returned += share
                remaining -= returned

        elif tier.tier_type == TierType.PREFERRED_RETURN:
            due = state.pref_due[tier.id]
            total = sum(due.values())
            if total > 0:
                pay = min(remaining, total)
                for class_id in ids:
                    share = pay * due[class_id] / total
                    paid[class_id] += share
                    due[class_id] -= share
                    state.profit[class_id] += share
                remaining -= pay

        elif tier.tier_type == TierType.CATCH_UP:
            remaining -= _catch_up(tier, remaining, state, classes, promote_id, paid)

        elif tier.tier_type == TierType.PROMOTE:
            if tier.enable_catch_up:
                remaining -= _catch_up(tier, remaining, state, classes, promote_id, paid)
            if remaining > 0:
                weights = [tier.distribution_splits.get(i, 0.0) for i in ids]
                for class_id, share in _allocate(remaining, ids, weights).items():
                    paid[class_id] += share
                    state.profit[class_id] += share
                remaining = 0.0

    if remaining > 0:
        # No promote tier took the residual
        for class_id, share in _allocate(remaining, ids, _distribution_weights(classes)).items():
            paid[class_id] += share
            state.profit[class_id] += share
    return paid


def _distribution_weights(classes: Sequence[EquityClass]) -> List[float]:
    weights = [c.distribution_pct for c in classes]
    if sum(weights) <= 0:
        weights = [c.contribution_pct for c in classes]
    return weights


def _single_tier(flows: Sequence[float], classes: Sequence[EquityClass]) -> Dict[str, List[float]]:
    ids = [c.id for c in classes]
    contribution = [c.contribution_pct for c in classes]
    distribution = _distribution_weights(classes)
    series = {i: [0.0] * len(flows) for i in ids}
    for t, cf in enumerate(flows):
        for class_id, share in _allocate(cf, ids, contribution if cf < 0 else distribution).items():
            series[class_id][t] = share
    return series


def _multi_tier(
    flows: Sequence[float],
    classes: Sequence[EquityClass],
    tiers: Sequence[WaterfallTier],
) -> Tuple[Dict[str, List[float]], _State]:
    ids = [c.id for c in classes]
    promote_id = _promote_class(classes)
    state = _State.start(ids, tiers)
    series = {i: [0.0] * len(flows) for i in ids}

    for t, cf in enumerate(flows):
        if t > 0:
            _accrue_pref(state, tiers)
        if cf < 0:
            for class_id, share in _allocate(cf, ids, [c.contribution_pct for c in classes]).items():
                series[class_id][t] = share
                state.unreturned[class_id] -= share
        elif cf > 0:
            for class_id, share in _distribute(cf, tiers, state, classes, promote_id).items():
                series[class_id][t] = share
    return series, state


def _clawback(
    flows: Sequence[float],
    series: Dict[str, List[float]],
    state: _State,
    classes: Sequence[EquityClass],
    tier: WaterfallTier,
    tiers: Sequence[WaterfallTier],
) -> Optional[ClawbackAdjustment]:
    """Compare actual promote take with a whole-life liquidation of all distributions.

    The liquidation returns total contributions, pays the lifetime pref
    accrued in the actual run, then applies catch-up and promote once.
    """
    ids = [c.id for c in classes]
    promote_id = _promote_class(classes)
    final = len(flows) - 1

    liquidation = _State.start(ids, tiers)
    for class_id in ids:
        liquidation.unreturned[class_id] = -sum(cf for cf in series[class_id] if cf < 0)
    for tier_id, accrued in state.pref_accrued.items():
        liquidation.pref_due[tier_id] = dict(accrued)

    total_distributed = sum(cf for cf in flows if cf > 0)
    entitled = _distribute(total_distributed, tiers, liquidation, classes, promote_id)
    actual = sum(cf for cf in series[promote_id] if cf > 0)
    excess = max(0.0, actual - entitled[promote_id])
    if excess <= INVARIANT_TOLERANCE:
        return None

    others = [c for c in classes if c.id != promote_id]
    if not others:
        return None
    adjustments = _allocate(excess, [c.id for c in others], [c.contribution_pct for c in others])
    adjustments[promote_id] = -excess
    logger.info("Clawback of %.2f from %s in tier %s", excess, promote_id, tier.id)
    return ClawbackAdjustment(
        tier_id=tier.id,
        method=tier.clawback_method,
        year_index=final,
        amount=excess,
        adjustments=adjustments,
    )


def _partner_result(equity_class: EquityClass, cash_flows: List[float]) -> PartnerResult:
    cumulative = []
    running = 0.0
    for cf in cash_flows:
        running += cf
        cumulative.append(running)
    contributed = any(cf < 0 for cf in cash_flows)
    return PartnerResult(
        partner_id=equity_class.id,
        name=equity_class.name,
        cash_flows=cash_flows,
        cumulative_cash_flows=cumulative,
        irr=irr(cash_flows),
        moic=equity_multiple(cash_flows) if contributed else None,
    )


def run_waterfall_engine(owner_cash_flows: Sequence[float], config: WaterfallConfig) -> WaterfallResult:
    """Allocate owner levered cash flows to equity classes.

    Args:
        owner_cash_flows: Year 0 equity flow followed by levered FCF.
        config: Equity classes and tiers; no tiers means single-tier mode.
            With no classes, a single owner class takes everything.

    Returns:
        WaterfallResult with one PartnerResult per class and one row per
        period. Partner flows sum to the owner flow in every period.

    Example:
        >>> config = WaterfallConfig(equity_classes=(EquityClass("lp", "LP", 1.0, 1.0),))
        >>> run_waterfall_engine([-100.0, 60.0, 60.0], config).partner("lp").cash_flows
        [-100.0, 60.0, 60.0]
    """
    flows = [float(cf) for cf in owner_cash_flows]
    classes = list(config.equity_classes) or [DEFAULT_OWNER_CLASS]
    tiers = list(config.tiers)

    clawbacks = []
    if tiers:
        series, state = _multi_tier(flows, classes, tiers)
        # The first tier enabling clawback sets the method; it runs once per waterfall
        clawback_tier = next((t for t in tiers if t.enable_clawback), None)
        if clawback_tier is not None and flows:
            adjustment = _clawback(flows, series, state, classes, clawback_tier, tiers)
            if adjustment is not None:
                clawbacks.append(adjustment)
                if adjustment.method == ClawbackMethod.IMMEDIATE:
                    for class_id, delta in adjustment.adjustments.items():
                        series[class_id][adjustment.year_index] += delta
    else:
        series = _single_tier(flows, classes)

    rows = []
    for t, cf in enumerate(flows):
        distributions = {c.id: series[c.id][t] for c in classes}
        difference = cf - sum(distributions.values())
        if abs(difference) > INVARIANT_TOLERANCE:
            logger.warning("Waterfall year %d: partner flows differ from owner flow by %.2f", t, difference)
        rows.append(WaterfallRow(year_index=t, owner_cash_flow=cf, partner_distributions=distributions))
    for adjustment in clawbacks:
        if adjustment.method == ClawbackMethod.ESCROW:
            escrow = {c.id: adjustment.adjustments.get(c.id, 0.0) for c in classes}
            rows.append(WaterfallRow(
                year_index=adjustment.year_index,
                owner_cash_flow=0.0,
                partner_distributions=escrow,
                is_escrow=True,
            ))

    return WaterfallResult(
        owner_cash_flows=flows,
        partners=[_partner_result(c, series[c.id]) for c in classes],
        rows=rows,
        clawbacks=clawbacks,
    )
