import math
from dataclasses import dataclass, replace

from printcost.material import DEFAULT_FILAMENT_DIAMETER_MM


@dataclass(frozen=True)
class Currency:
    name: str
    symbol: str
    rate: float


CURRENCIES = {
    "USD": Currency("US Dollar", "$", 1.00),
    "PHP": Currency("Philippine Peso", "₱", 58.75),
    "EUR": Currency("Euro", "€", 0.92),
    "GBP": Currency("British Pound", "£", 0.79),
    "CAD": Currency("Canadian Dollar", "C$", 1.37),
    "AUD": Currency("Australian Dollar", "A$", 1.50),
    "JPY": Currency("Japanese Yen", "¥", 157.30),
}

# Rate fields that are quoted in the selected currency
MONETARY_FIELDS = ("filament_price", "electricity_rate", "labor_rate", "post_processing_rate")


@dataclass
class CostInput:
    print_name: str = ""
    customer_name: str = ""
    purchase_date: str = ""
    currency: str = "USD"
    filament_diameter: float = DEFAULT_FILAMENT_DIAMETER_MM
    filament_weight: float = 50.0
    # per kg
    filament_price: float = 25.0
    include_electricity: bool = True
    print_time_hours: int = 4
    print_time_minutes: int = 0
    print_time_seconds: int = 0
    # per kWh
    electricity_rate: float = 0.15
    printer_power_kw: float = 0.05
    include_labor: bool = True
    labor_time_hours: int = 0
    labor_time_minutes: int = 30
    labor_rate: float = 15.0
    include_post_processing: bool = True
    post_processing_hours: int = 1
    post_processing_minutes: int = 0
    post_processing_rate: float = 10.0
    markup: float = 200.0


@dataclass
class CostBreakdown:
    material_cost: float
    electricity_cost: float
    labor_cost: float
    post_processing_cost: float
    total_cost: float
    markup_price: float
    final_price: float


def parse_field(text, kind):
    """Read a typed-in number; anything unparseable counts as zero."""
    try:
        value = float(text)
    except ValueError:
        return kind(0)
    if not math.isfinite(value):
        return kind(0)
    return kind(value)


def print_hours(data):
    return data.print_time_hours + data.print_time_minutes / 60 + data.print_time_seconds / 3600


def calculate_costs(data):
    material_cost = (data.filament_weight / 1000) * data.filament_price

    electricity_cost = 0.0
    if data.include_electricity:
        electricity_cost = print_hours(data) * data.printer_power_kw * data.electricity_rate

    labor_cost = 0.0
    if data.include_labor:
        labor_cost = (data.labor_time_hours + data.labor_time_minutes / 60) * data.labor_rate

    post_processing_cost = 0.0
    if data.include_post_processing:
        post_hours = data.post_processing_hours + data.post_processing_minutes / 60
        post_processing_cost = post_hours * data.post_processing_rate

    total_cost = material_cost + electricity_cost + labor_cost + post_processing_cost
    markup_price = total_cost * (data.markup / 100)

    return CostBreakdown(
        material_cost=material_cost,
        electricity_cost=electricity_cost,
        labor_cost=labor_cost,
        post_processing_cost=post_processing_cost,
        total_cost=total_cost,
        markup_price=markup_price,
        final_price=total_cost + markup_price,
    )


def convert_currency(data, currency_code):
    """Return a copy of ``data`` with its rates re-quoted in ``currency_code``."""
    old_rate = CURRENCIES[data.currency].rate
    new_rate = CURRENCIES[currency_code].rate
    converted = {
        name: getattr(data, name) / old_rate * new_rate for name in MONETARY_FIELDS
    }
    return replace(data, currency=currency_code, **converted)


def breakdown_lines(costs, currency):
    symbol = currency.symbol
    return [
        ("Material Cost", f"{symbol} {costs.material_cost:.2f}"),
        ("Electricity Cost", f"{symbol} {costs.electricity_cost:.2f}"),
        ("Labor Cost", f"{symbol} {costs.labor_cost:.2f}"),
        ("Post-Processing Cost", f"{symbol} {costs.post_processing_cost:.2f}"),
        ("Total Cost", f"{symbol} {costs.total_cost:.2f}"),
        ("Markup Price", f"{symbol} {costs.markup_price:.2f}"),
        ("Final Price", f"{symbol} {costs.final_price:.2f}"),
    ]


def format_breakdown(costs, currency):
    return "\n".join(f"{label}: {amount}" for label, amount in breakdown_lines(costs, currency))
