"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.test_inputs import (
    get_sample_hotel,
    get_sample_model_input,
    get_resort_model_input,
    get_tiered_waterfall,
)


@pytest.fixture
def hotel_config():
    """100-key hotel at $250 ADR and 70% occupancy."""
    return get_sample_hotel()


@pytest.fixture
def model_input():
    """Single-hotel model input with a 65% senior loan and a 70/30 LP/GP split."""
    return get_sample_model_input()


@pytest.fixture
def resort_input():
    """Hotel, villas and restaurant on the sample capital stack."""
    return get_resort_model_input()


@pytest.fixture
def tiered_waterfall():
    """ROC, 8% pref, 20% GP catch-up and 80/20 promote for a 90/10 LP/GP split."""
    return get_tiered_waterfall()
