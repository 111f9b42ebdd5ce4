"""Registering a custom formatter for failure messages."""

from typing import Any

from pydantic import BaseModel

from tripline import AssertionFailure, FormatCtx, FormatResult, FormattedValue, Formatter, assert_config, expect


class Quantity(BaseModel):
    value: float
    unit: str


def format_quantity(ctx: FormatCtx, value: Any) -> FormattedValue | None:
    if isinstance(value, Quantity):
        return FormattedValue(FormatResult.OK, f"{value.value} {value.unit}")
    return None


handle = assert_config.add_formatter(Formatter("Quantity", format_quantity))

try:
    expect(Quantity(value=1.2, unit="kg")).to.deep.equal(Quantity(value=1.0, unit="kg"))
except AssertionFailure as e:
    print(e.message)  # expected 1.2 kg to deeply equal 1.0 kg

handle.rm()
