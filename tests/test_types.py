"""
Tests for core value types: Swing, Phase and ScenarioType.
"""

from decimal import Decimal

import pytest

from src.elliott_wave.degree import Degree
from src.elliott_wave.numeric import is_nan, to_num
from src.elliott_wave.types import Phase, ScenarioType, Swing, alternates

from conftest import make_swing


class TestSwing:
    """Tests for Swing."""

    def test_derived_values(self):
        swing = make_swing(0, 3, 100, 110)
        assert swing.is_rising
        assert swing.amplitude == Decimal("10")
        assert swing.length == 3
        assert swing.high == Decimal("110")
        assert swing.low == Decimal("100")

    def test_falling_swing(self):
        swing = make_swing(3, 5, 110, 104)
        assert not swing.is_rising
        assert swing.amplitude == Decimal("6")
        assert swing.high == Decimal("110")

    def test_index_order_enforced(self):
        with pytest.raises(ValueError, match="must be greater than"):
            Swing(5, 5, Decimal("1"), Decimal("2"), Degree.MINOR)
        with pytest.raises(ValueError):
            Swing(6, 2, Decimal("1"), Decimal("2"), Degree.MINOR)

    def test_nan_price_makes_swing_invalid(self):
        swing = Swing(0, 4, Decimal("NaN"), Decimal("10"), Degree.MINOR)
        assert not swing.is_valid
        assert is_nan(swing.amplitude)
        assert not swing.is_rising

    def test_immutability(self):
        swing = make_swing(0, 3, 100, 110)
        with pytest.raises(AttributeError):
            swing.to_price = Decimal("1")

    def test_alternates(self):
        up = make_swing(0, 3, 100, 110)
        down = make_swing(3, 5, 110, 104)
        assert alternates([up, down])
        assert not alternates([up, make_swing(3, 6, 110, 120)])
        assert alternates([])


class TestPhase:
    """Tests for Phase predicates."""

    def test_impulse_predicates(self):
        assert Phase.WAVE3.is_impulse
        assert not Phase.WAVE3.is_corrective
        assert Phase.WAVE3.impulse_index == 3
        assert Phase.WAVE3.corrective_index == 0

    def test_corrective_predicates(self):
        assert Phase.CORRECTIVE_B.is_corrective
        assert Phase.CORRECTIVE_B.corrective_index == 2
        assert Phase.CORRECTIVE_B.position == 2

    def test_none_phase(self):
        assert not Phase.NONE.is_impulse
        assert not Phase.NONE.is_corrective
        assert Phase.NONE.position == 0

    def test_completes_structure(self):
        assert Phase.WAVE5.completes_structure
        assert Phase.CORRECTIVE_C.completes_structure
        assert not Phase.WAVE4.completes_structure

    def test_phase_from_leg_count(self):
        assert Phase.impulse(4) is Phase.WAVE4
        assert Phase.corrective(1) is Phase.CORRECTIVE_A
        with pytest.raises(ValueError):
            Phase.impulse(6)
        with pytest.raises(ValueError):
            Phase.corrective(0)


class TestScenarioType:
    def test_families(self):
        assert ScenarioType.IMPULSE.is_impulse
        assert ScenarioType.CORRECTIVE_FLAT.is_corrective
        assert ScenarioType.IMPULSE.max_swings == 5
        assert ScenarioType.CORRECTIVE_ZIGZAG.max_swings == 3
        assert ScenarioType.CORRECTIVE_FLAT.id_prefix == "flat"


class TestNumeric:
    """Tests for Decimal/float literal conversion."""

    def test_decimal_conversion_is_exact(self):
        assert to_num(1.618, like=Decimal("10")) == Decimal("1.618")

    def test_float_conversion(self):
        assert to_num(Decimal("2.5"), like=1.0) == 2.5

    def test_nan_round_trips_type(self):
        assert is_nan(to_num(float("nan"), like=Decimal("1")))
        assert isinstance(to_num(float("nan"), like=Decimal("1")), Decimal)
