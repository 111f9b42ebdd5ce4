"""Assertions on a small battery model.

Run with `python examples/battery_checks.py`. Every check passes, the last
block shows how a failure message looks.
"""

from pydantic import BaseModel

from tripline import AssertionFailure, AssertSession, assert_, expect


class Cell(BaseModel):
    name: str
    voltage: float  # in Volts


class Battery(BaseModel):
    cells: list[Cell]
    capacity: float  # in Watt-hours


battery = Battery(
    cells=[Cell(name="A", voltage=3.7), Cell(name="B", voltage=3.6)],
    capacity=120.0,
)

expect(battery.capacity, "capacity").to.be.within(100.0, 150.0)
expect(battery).to.have.nested.property("cells[0].name", "A")
expect(battery.cells).to.have.length_of(2).and_.not_.be.empty()
expect({"capacity": 120}).to.deep.equal({"capacity": "120"})
assert_.deep_equal(battery, Battery(cells=battery.cells, capacity=120))

session = AssertSession()
with session:
    try:
        expect(battery.cells[1].voltage, "cell B").to.be.at_least(3.7)
    except AssertionFailure as e:
        print(e.message)  # cell B: expected 3.6 to be at least 3.7

print(f"{session.failure_count} failure(s) recorded")
