"""Dashboard totals, monthly series and per-supplier expense breakdown."""
from dataclasses import dataclass

from fleetlog.records import fuel_cost, km_driven, liters_consumed


@dataclass(frozen=True)
class MonthTotals:
    month: str
    km: float = 0.0
    fuel: float = 0.0
    expense: float = 0.0


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    value: float


@dataclass(frozen=True)
class Summary:
    total_km: float
    total_fuel_cost: float
    total_expenses: float
    total_liters: float
    overall_avg_km_l: float
    monthly_data: tuple
    expense_by_category: tuple
    truck_log_count: int = 0
    expense_count: int = 0

    @property
    def is_empty(self):
        return not self.truck_log_count and not self.expense_count


def summarize(truck_logs, expenses):
    """Reduce filtered records to the dashboard summary.

    Pure: the inputs are only read. Months are bucketed on the ``YYYY-MM`` key
    and sorted lexically (which is chronological); suppliers are sorted by total
    cost, largest first, keeping first-seen order for ties.
    """
    total_km = total_fuel = total_liters = total_expenses = 0.0
    monthly = {}

    for log in truck_logs:
        km, cost = km_driven(log), fuel_cost(log)
        total_km += km
        total_fuel += cost
        total_liters += liters_consumed(log)
        bucket = monthly.setdefault(log.get("month"), {"km": 0.0, "fuel": 0.0, "expense": 0.0})
        bucket["km"] += km
        bucket["fuel"] += cost

    by_supplier = {}
    for exp in expenses:
        cost = float(exp.get("cost") or 0)
        total_expenses += cost
        bucket = monthly.setdefault(exp.get("month"), {"km": 0.0, "fuel": 0.0, "expense": 0.0})
        bucket["expense"] += cost
        supplier = exp.get("supplier")
        by_supplier[supplier] = by_supplier.get(supplier, 0.0) + cost

    monthly_data = tuple(MonthTotals(month, **vals)
                         for month, vals in sorted(monthly.items(), key=lambda kv: kv[0] or ""))
    expense_by_category = tuple(CategoryTotal(name, value)
                                for name, value in sorted(by_supplier.items(), key=lambda kv: -kv[1]))
    avg = total_km / total_liters if total_liters > 0 else 0.0

    return Summary(
        total_km=total_km,
        total_fuel_cost=total_fuel,
        total_expenses=total_expenses,
        total_liters=total_liters,
        overall_avg_km_l=avg,
        monthly_data=monthly_data,
        expense_by_category=expense_by_category,
        truck_log_count=len(truck_logs),
        expense_count=len(expenses),
    )
