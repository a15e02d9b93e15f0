import copy

from conftest import expense, truck_log
from fleetlog.aggregation import CategoryTotal, MonthTotals, summarize


def test_monthly_bucket_scenario():
    logs = [truck_log(initialKm=0, finalKm=500, litersFueled=100, fuelPricePerLiter=6),
            truck_log(initialKm=0, finalKm=300, litersFueled=50, fuelPricePerLiter=6)]
    exps = [expense(month="2024-06", supplier="Borracharia Zé", cost=1200)]
    s = summarize(logs, exps)
    assert s.monthly_data == (MonthTotals("2024-06", km=800.0, fuel=900.0, expense=1200.0),)
    assert s.total_km == 800
    assert s.total_fuel_cost == 900
    assert s.total_expenses == 1200
    assert s.overall_avg_km_l == 800 / 150
    assert s.expense_by_category == (CategoryTotal("Borracharia Zé", 1200.0),)


def test_empty_collections_average_zero():
    s = summarize([], [])
    assert s.overall_avg_km_l == 0
    assert s.monthly_data == () and s.expense_by_category == ()
    assert s.is_empty


def test_zero_liters_average_is_zero_not_nan():
    s = summarize([truck_log(litersFueled=0)], [])
    assert s.overall_avg_km_l == 0.0
    assert s.total_km == 500


def test_months_sorted_ascending_and_created_on_first_touch():
    logs = [truck_log(month="2024-08"), truck_log(month="2023-12")]
    exps = [expense(month="2024-01", cost=10)]
    s = summarize(logs, exps)
    assert [m.month for m in s.monthly_data] == ["2023-12", "2024-01", "2024-08"]
    assert s.monthly_data[1] == MonthTotals("2024-01", km=0.0, fuel=0.0, expense=10.0)


def test_categories_sorted_descending_with_stable_ties():
    exps = [expense(supplier="A", cost=100), expense(supplier="B", cost=300),
            expense(supplier="C", cost=100), expense(supplier="A", cost=50)]
    s = summarize([], exps)
    assert [(c.name, c.value) for c in s.expense_by_category] == [("B", 300), ("A", 150), ("C", 100)]

    tie = summarize([], [expense(supplier="X", cost=5), expense(supplier="Y", cost=5)])
    assert [c.name for c in tie.expense_by_category] == ["X", "Y"]


def test_negative_km_is_summed_as_is():
    s = summarize([truck_log(initialKm=800, finalKm=500)], [])
    assert s.total_km == -300


def test_pure_and_deterministic():
    logs = [truck_log(), truck_log(month="2024-05", finalKm=1900)]
    exps = [expense(), expense(supplier="Posto", cost=80)]
    before = copy.deepcopy((logs, exps))
    assert summarize(logs, exps) == summarize(copy.deepcopy(logs), copy.deepcopy(exps))
    assert (logs, exps) == before


def test_accepts_read_only_tuples():
    s = summarize((truck_log(),), (expense(),))
    assert s.truck_log_count == 1 and s.expense_count == 1
