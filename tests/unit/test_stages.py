"""
Unit tests for the stage catalog.
"""

from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from matrix_system.config.stages import (
    STAGES,
    MAX_STAGE,
    MIN_STAGE,
    getNextStage,
    getStageByLevel,
    getStagePrice,
)


class TestStageCatalog:
    """Test static stage table."""

    def test_seven_stages_in_order(self):
        assert [stage.level for stage in STAGES] == [1, 2, 3, 4, 5, 6, 7]
        assert MIN_STAGE == 1
        assert MAX_STAGE == 7

    def test_prices(self):
        assert [stage.price for stage in STAGES] == [
            Decimal("30"), Decimal("90"), Decimal("270"), Decimal("810"),
            Decimal("2430"), Decimal("7290"), Decimal("43740"),
        ]

    def test_names(self):
        assert getStageByLevel(3).name == "Stage 3 Adpack"

    def test_lookup_missing_level(self):
        assert getStageByLevel(0) is None
        assert getStageByLevel(8) is None

    def test_next_stage(self):
        assert getNextStage(1).level == 2
        assert getNextStage(6).level == 7

    def test_no_stage_after_last(self):
        assert getNextStage(7) is None

    def test_price_of_unknown_stage(self):
        with pytest.raises(ValueError):
            getStagePrice(9)

    def test_stage_is_immutable(self):
        with pytest.raises(FrozenInstanceError):
            STAGES[0].price = Decimal("1")
