"""Equity waterfall inputs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Dict, Optional, Tuple

from pydantic import AliasChoices, Field, with_config

from .operations import INPUT_CONFIG, _freeze_sequences


class TierType(str, Enum):
    """Distribution tier kinds, processed in configured order."""
    RETURN_OF_CAPITAL = "return_of_capital"
    PREFERRED_RETURN = "preferred_return"
    CATCH_UP = "catch_up"
    PROMOTE = "promote"


class ClawbackMethod(str, Enum):
    """How a final-period clawback is booked."""
    IMMEDIATE = "immediate"  # Adjusts the final period's distributions
    ESCROW = "escrow"        # Booked as a separate escrow row


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class EquityClass:
    """An investor class, e.g. LP or GP."""

    id: str
    name: str = ""
    contribution_pct: float = 0.0
    distribution_pct: float = 0.0


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class WaterfallTier:
    """One tier of a multi-tier waterfall.

    ``distribution_splits`` maps equity class id to its share of the cash
    flowing through the tier. Catch-up sends ``catch_up_rate`` of the cash
    to the promote class until it holds ``catch_up_target_split`` of total
    profit distributed so far.
    """

    id: str
    tier_type: Annotated[TierType, Field(alias="type", validation_alias=AliasChoices("type", "tierType"))]
    hurdle_irr: Optional[float] = None
    distribution_splits: Dict[str, float] = field(default_factory=dict)
    compound_pref: bool = False

    enable_catch_up: bool = False
    catch_up_rate: Optional[float] = None
    catch_up_target_split: Optional[Dict[str, float]] = None

    enable_clawback: bool = False
    clawback_method: ClawbackMethod = ClawbackMethod.IMMEDIATE


@with_config(INPUT_CONFIG)
@dataclass(frozen=True)
class WaterfallConfig:
    """Equity classes plus optional tiers. No tiers means single-tier mode."""

    equity_classes: Tuple[EquityClass, ...] = ()
    tiers: Tuple[WaterfallTier, ...] = ()
    id: str = ""
    name: str = ""

    def __post_init__(self):
        _freeze_sequences(self)

    def class_ids(self) -> Tuple[str, ...]:
        return tuple(c.id for c in self.equity_classes)
