import pytest

from conftest import truck_log
from fleetlog.errors import ValidationFailure
from fleetlog.records import (EXPENSE, KINDS, TRUCK, efficiency, fuel_cost, get_kind, km_driven,
                              liters_consumed)


def test_derived_quantities():
    log = truck_log(initialKm=1000, finalKm=1500, litersFueled=200, fuelPricePerLiter=6)
    assert km_driven(log) == 500
    assert fuel_cost(log) == 1200
    assert liters_consumed(log) == 200
    assert efficiency(log) == 2.5


@pytest.mark.parametrize("overrides", [
    {"litersFueled": 0},
    {"finalKm": 900},
    {"finalKm": 1000},
])
def test_efficiency_falls_back_to_zero(overrides):
    assert efficiency(truck_log(**overrides)) == 0.0


def test_km_driven_is_not_clamped():
    assert km_driven(truck_log(initialKm=500, finalKm=200)) == -300


def test_dispatch_table():
    assert set(KINDS) == {"truck", "expense"}
    assert get_kind("truck") is TRUCK
    assert get_kind(EXPENSE) is EXPENSE
    with pytest.raises(ValueError):
        get_kind("trailer")


def test_validate_full_and_partial():
    clean = TRUCK.validate(truck_log(initialKm=1000))
    assert clean["initialKm"] == 1000.0 and isinstance(clean["initialKm"], float)
    assert "id" not in TRUCK.validate(dict(truck_log(), id="x"))
    assert EXPENSE.validate({"cost": 3}, partial=True) == {"cost": 3.0}
    with pytest.raises(ValidationFailure, match="supplier is required"):
        EXPENSE.validate({"month": "2024-06", "description": "x", "cost": 1})
    with pytest.raises(ValidationFailure, match="null"):
        EXPENSE.validate({"supplier": None}, partial=True)
    with pytest.raises(ValidationFailure, match="YYYY-MM"):
        EXPENSE.validate({"month": "2024-13"}, partial=True)
    with pytest.raises(ValidationFailure):
        TRUCK.validate([])


def test_parse_form_defaults_bad_numbers_to_zero():
    form = {"month": "2024-07", "supplier": " Auto Peças ", "description": "Filtro", "cost": "abc"}
    assert EXPENSE.parse_form(form) == {"month": "2024-07", "supplier": "Auto Peças",
                                        "description": "Filtro", "cost": 0.0}
    assert EXPENSE.parse_form({"cost": "12,50"})["cost"] == 12.5


def test_diff_keeps_only_changed_fields():
    original = dict(truck_log(), id="abc", createdAt="t")
    payload = dict(truck_log(), finalKm=1600.0)
    assert TRUCK.diff(original, payload) == {"finalKm": 1600.0}
    assert TRUCK.diff(original, truck_log()) == {}


def test_report_columns_and_rows():
    assert [c.title for c in EXPENSE.columns()] == ["Mês", "Fornecedor", "Descrição", "Valor"]
    assert EXPENSE.columns(report_mode=False)[-1].title == "Ações"
    row = TRUCK.row(truck_log())
    assert row == ["ABC1D23", "500 km", "200 L", "R$ 1.200,00", "2,50 km/l"]
    assert len(TRUCK.row(truck_log(), report_mode=False)) == len(TRUCK.columns(report_mode=False))
