import math

import pytest

from app.utils.psychrometrics import calculate_heat_index_c, heat_stress_zone


class TestHeatIndex:
    def test_missing_inputs_return_none(self):
        assert calculate_heat_index_c(None, 50.0) is None
        assert calculate_heat_index_c(30.0, None) is None
        assert calculate_heat_index_c(float("nan"), 50.0) is None

    def test_mild_conditions_use_simple_formula(self):
        # 20°C / 50% is well below 80°F, so the Steadman average applies.
        temp_f = 68.0
        simple_f = 0.5 * (temp_f + 61.0 + ((temp_f - 68.0) * 1.2) + (50.0 * 0.094))
        expected = round((simple_f - 32) * 5 / 9, 2)

        assert calculate_heat_index_c(20.0, 50.0) == expected

    def test_hot_humid_conditions_use_rothfusz_regression(self):
        # NWS table: 90°F at 70% RH is a heat index of about 106°F (41.1°C).
        result = calculate_heat_index_c(32.22, 70.0)
        assert result == pytest.approx(41.1, abs=0.5)

    def test_low_humidity_adjustment_lowers_the_index(self):
        # 100°F at 10% RH sits in the low-humidity correction band.
        adjusted = calculate_heat_index_c(37.78, 10.0)
        t, rh = 100.0, 10.0
        unadjusted_f = (
            -42.379 + 2.04901523 * t + 10.14333127 * rh - 0.22475541 * t * rh
            - 0.00683783 * t ** 2 - 0.05481717 * rh ** 2 + 0.00122874 * t ** 2 * rh
            + 0.00085282 * t * rh ** 2 - 0.00000199 * t ** 2 * rh ** 2
        )
        assert adjusted < round((unadjusted_f - 32) * 5 / 9, 2)

    def test_high_humidity_adjustment_raises_the_index(self):
        # 85°F at 90% RH sits in the high-humidity correction band.
        adjusted = calculate_heat_index_c(29.44, 90.0)
        t, rh = 85.0, 90.0
        unadjusted_f = (
            -42.379 + 2.04901523 * t + 10.14333127 * rh - 0.22475541 * t * rh
            - 0.00683783 * t ** 2 - 0.05481717 * rh ** 2 + 0.00122874 * t ** 2 * rh
            + 0.00085282 * t * rh ** 2 - 0.00000199 * t ** 2 * rh ** 2
        )
        assert adjusted > round((unadjusted_f - 32) * 5 / 9, 2)

    def test_result_is_finite_and_rounded(self):
        result = calculate_heat_index_c(35.0, 60.0)
        assert math.isfinite(result)
        assert result == round(result, 2)


@pytest.mark.parametrize(
    "temperature, zone",
    [(29.9, "safe"), (30.0, "warning"), (34.9, "warning"), (35.0, "danger"), (None, None)],
)
def test_heat_stress_zone_boundaries(temperature, zone):
    assert heat_stress_zone(temperature) == zone
