from datetime import datetime, timedelta
from math import isclose

from controle_estoque.domain.formulas import (
    active_days,
    cost_projection,
    daily_average,
    days_until_empty,
    monthly_projection,
    round_half_up,
)

T0 = datetime(2025, 1, 1, 8, 0, 0)


def test_active_days_fixed_window():
    assert active_days(30) == 30
    assert active_days(7, T0, T0 + timedelta(days=2)) == 7


def test_active_days_unbounded_uses_ceil_of_span():
    assert active_days(None, T0, T0 + timedelta(days=2, hours=12)) == 3
    assert active_days(None, T0, T0 + timedelta(days=4)) == 4


def test_active_days_single_instant_floors_to_one():
    assert active_days(None, T0, T0) == 1
    assert active_days(None, T0, T0 + timedelta(hours=3)) == 1


def test_daily_and_monthly():
    media = daily_average(15, 30)
    assert isclose(media, 0.5)
    assert isclose(monthly_projection(media), 15.0)
    assert isclose(cost_projection(15.0, 2.0), 30.0)
    # divisor nunca abaixo de 1
    assert daily_average(10, 0) == 10.0


def test_days_until_empty():
    assert days_until_empty(50, 0.5) == 100
    assert days_until_empty(50, 0) is None
    assert days_until_empty(0, 3.0) == 0


def test_round_half_up():
    # Python round() arredondaria 2.5 para 2
    assert round_half_up(2.5) == 3
    assert round_half_up(6.4999) == 6
    assert round_half_up(0.5) == 1
