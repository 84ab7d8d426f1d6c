"""Tests for JSON serialization of model inputs."""

import json
from dataclasses import replace

import pytest
from pydantic import ValidationError

from hospitality_model.models import (
    AmortizationType,
    AnyOperationConfig,
    CovenantType,
    DebtTrancheConfig,
    HotelConfig,
    OperationType,
    RestaurantConfig,
    TierType,
    TrancheType,
    WaterfallTier,
    dumps_model_input,
    from_dict,
    loads_model_input,
    stable_hash,
    to_dict,
)
from hospitality_model.models.capital import Covenant


class TestRoundTrip:
    """Tests for dumps/loads."""

    def test_sample_round_trip(self, model_input):
        """The sample input survives a JSON round trip unchanged."""
        assert loads_model_input(dumps_model_input(model_input)) == model_input

    def test_resort_with_tiers_round_trip(self, resort_input, tiered_waterfall):
        """Mixed operations and tier dictionaries round-trip."""
        original = replace(resort_input, waterfall_config=tiered_waterfall)
        restored = loads_model_input(dumps_model_input(original))
        assert restored == original
        assert isinstance(restored.scenario.operations[2], RestaurantConfig)

    def test_output_is_camel_case(self, model_input):
        """Dumped JSON uses camelCase keys and the operation tag."""
        data = json.loads(dumps_model_input(model_input))
        operation = data["scenario"]["operations"][0]
        assert operation["operationType"] == "HOTEL"
        assert operation["occupancyByMonth"] == [0.70] * 12
        assert "projectConfig" in data
        assert data["capitalConfig"]["debtTranches"][0]["type"] == "SENIOR"

    def test_snake_case_input_accepted(self, model_input):
        """snake_case keys decode too."""
        data = json.loads(dumps_model_input(model_input))
        data["project_config"] = data.pop("projectConfig")
        data["project_config"]["discount_rate"] = data["project_config"].pop("discountRate")
        assert loads_model_input(json.dumps(data)) == model_input

    def test_to_dict_writes_tag(self, hotel_config):
        """to_dict emits the operation tag with enum values."""
        data = to_dict(hotel_config)
        assert data["operationType"] == "HOTEL"
        assert data["ownershipModel"] == "BUILD_AND_OPERATE"


class TestCamelCase:
    """Tests for camelCase and alias decoding."""

    def test_tranche_from_camel_case(self):
        """camelCase keys and the "type" alias decode into a tranche."""
        tranche = from_dict(DebtTrancheConfig, {
            "id": "mezz",
            "type": "MEZZ",
            "initialPrincipal": 5_000_000,
            "interestRate": 0.14,
            "amortizationType": "interest_only",
            "termYears": 5,
        })
        assert tranche.tranche_type == TrancheType.MEZZ
        assert tranche.amortization_type == AmortizationType.INTEREST_ONLY
        assert tranche.initial_principal == pytest.approx(5_000_000.0)
        assert isinstance(tranche.initial_principal, float)

    def test_tranche_type_by_field_name(self):
        """The field name itself is accepted alongside the alias."""
        tranche = from_dict(DebtTrancheConfig, {"id": "b", "tranche_type": "BRIDGE"})
        assert tranche.tranche_type == TrancheType.BRIDGE

    def test_covenant_type_alias(self):
        """Covenants accept "type" for covenant_type."""
        covenant = from_dict(Covenant, {"id": "c1", "type": "min_dscr", "threshold": 1.2, "gracePeriod": 2})
        assert covenant.covenant_type == CovenantType.MIN_DSCR
        assert covenant.grace_period == 2

    def test_tier_type_alias(self):
        """Tiers accept "type" and keep class ids in their splits."""
        tier = from_dict(WaterfallTier, {
            "id": "pref", "type": "preferred_return", "hurdleIrr": 0.08,
            "distributionSplits": {"lp": 0.9, "gp": 0.1},
        })
        assert tier.tier_type == TierType.PREFERRED_RETURN
        assert tier.distribution_splits == {"lp": 0.9, "gp": 0.1}

    def test_operation_resolved_from_tag(self):
        """The operation union resolves to the tagged subclass."""
        operation = from_dict(AnyOperationConfig, {
            "operationType": "HOTEL", "id": "h", "keys": 40, "avgDailyRate": 180,
            "occupancyByMonth": [0.6] * 12,
        })
        assert isinstance(operation, HotelConfig)
        assert operation.operation_type == OperationType.HOTEL
        assert operation.occupancy_by_month == (0.6,) * 12

    def test_operation_without_tag_rejected(self):
        """A serialized operation must name its type."""
        with pytest.raises(ValidationError):
            from_dict(AnyOperationConfig, {"id": "h"})

    def test_unknown_tag_rejected(self):
        """Tags outside the operation kinds are rejected."""
        with pytest.raises(ValidationError):
            from_dict(AnyOperationConfig, {"operationType": "CASINO", "id": "c"})

    def test_unknown_fields_ignored(self):
        """Fields the model does not know are dropped."""
        tranche = from_dict(DebtTrancheConfig, {"id": "a", "notes": "ignored"})
        assert tranche.id == "a"

    def test_mismatched_operation_type_rejected(self):
        """A config cannot carry another kind's tag."""
        with pytest.raises(ValueError):
            HotelConfig(id="h", operation_type=OperationType.VILLAS)


class TestStableHash:
    """Tests for stable_hash."""

    def test_key_order_independent(self):
        """Dictionary ordering does not change the hash."""
        assert stable_hash({"a": 1, "b": 2}) == stable_hash({"b": 2, "a": 1})

    def test_content_sensitive(self, model_input):
        """Any changed value changes the hash."""
        changed = replace(model_input, project_config=replace(model_input.project_config, discount_rate=0.11))
        assert stable_hash(model_input) != stable_hash(changed)
        assert stable_hash(model_input) == stable_hash(loads_model_input(dumps_model_input(model_input)))

    def test_nested_configs_in_mapping(self, model_input):
        """Mappings holding configs hash by content."""
        first = stable_hash({"scenario": model_input.scenario})
        assert first == stable_hash({"scenario": replace(model_input.scenario)})
        renamed = replace(model_input.scenario, name="Other")
        assert first != stable_hash({"scenario": renamed})

    def test_hex_digest(self, model_input):
        """The hash is a SHA-256 hex digest."""
        assert len(stable_hash(model_input)) == 64
        json.loads(dumps_model_input(model_input))


class TestDeprecatedAmount:
    """Tests for the deprecated tranche amount field."""

    def test_amount_moves_to_principal(self):
        """amount warns and becomes initial_principal."""
        with pytest.warns(DeprecationWarning):
            tranche = DebtTrancheConfig(id="old", amount=1_000_000)
        assert tranche.initial_principal == 1_000_000
        assert tranche.amount is None

    def test_principal_wins_over_amount(self):
        """An explicit initial_principal is kept."""
        with pytest.warns(DeprecationWarning):
            tranche = DebtTrancheConfig(id="old", initial_principal=500, amount=1_000)
        assert tranche.initial_principal == 500

    def test_amount_in_json_moves_to_principal(self):
        """The deprecated key still decodes."""
        with pytest.warns(DeprecationWarning):
            tranche = from_dict(DebtTrancheConfig, {"id": "old", "amount": 2_000})
        assert tranche.initial_principal == pytest.approx(2_000)
