import pytest

from printcost.pricing import (
    CURRENCIES,
    CostInput,
    calculate_costs,
    convert_currency,
    format_breakdown,
    parse_field,
    print_hours,
)


def test_default_breakdown():
    costs = calculate_costs(CostInput())
    assert costs.material_cost == pytest.approx(1.25)
    assert costs.electricity_cost == pytest.approx(4 * 0.05 * 0.15)
    assert costs.labor_cost == pytest.approx(7.5)
    assert costs.post_processing_cost == pytest.approx(10.0)
    assert costs.total_cost == pytest.approx(18.78)
    assert costs.markup_price == pytest.approx(37.56)
    assert costs.final_price == pytest.approx(56.34)


def test_excluded_categories_cost_nothing():
    data = CostInput(include_electricity=False, include_labor=False, include_post_processing=False)
    costs = calculate_costs(data)
    assert costs.electricity_cost == 0
    assert costs.labor_cost == 0
    assert costs.post_processing_cost == 0
    assert costs.total_cost == pytest.approx(costs.material_cost)


def test_print_hours_counts_seconds():
    data = CostInput(print_time_hours=1, print_time_minutes=30, print_time_seconds=1800)
    assert print_hours(data) == pytest.approx(2.0)


def test_zero_markup():
    costs = calculate_costs(CostInput(markup=0))
    assert costs.markup_price == 0
    assert costs.final_price == costs.total_cost


def test_convert_currency_scales_rates():
    data = CostInput()
    converted = convert_currency(data, "PHP")
    assert converted.currency == "PHP"
    assert converted.filament_price == pytest.approx(25 * 58.75)
    assert converted.labor_rate == pytest.approx(15 * 58.75)
    assert converted.electricity_rate == pytest.approx(0.15 * 58.75)
    assert converted.post_processing_rate == pytest.approx(10 * 58.75)
    # weights and times are untouched
    assert converted.filament_weight == data.filament_weight
    assert data.currency == "USD"


def test_convert_currency_round_trip():
    data = convert_currency(convert_currency(CostInput(), "JPY"), "USD")
    assert data.filament_price == pytest.approx(25)


def test_convert_unknown_currency():
    with pytest.raises(KeyError):
        convert_currency(CostInput(), "XYZ")


def test_format_breakdown_uses_two_decimals():
    text = format_breakdown(calculate_costs(CostInput()), CURRENCIES["EUR"])
    assert "Material Cost: € 1.25" in text
    assert text.splitlines()[-1] == "Final Price: € 56.34"


@pytest.mark.parametrize("text, kind, expected", [
    ("12.5", float, 12.5),
    ("2.9", int, 2),
    ("", float, 0.0),
    ("abc", int, 0),
    ("inf", int, 0),
    ("1e400", int, 0),
    ("nan", int, 0),
    ("inf", float, 0.0),
    ("-1e400", float, 0.0),
])
def test_parse_field(text, kind, expected):
    value = parse_field(text, kind)
    assert value == expected
    assert type(value) is kind
