from aquafloc.economics.savings import (
    EconInputs,
    SavingsLedger,
    recovered_value_per_hr,
    roi_percent,
    savings_increment,
    unit_costs,
)

__all__ = [
    "EconInputs",
    "SavingsLedger",
    "unit_costs",
    "roi_percent",
    "recovered_value_per_hr",
    "savings_increment",
]
