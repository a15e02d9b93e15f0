from dataclasses import dataclass, fields, replace

from fleetlog.formatting import text_value

TRUCK_FILTER_FIELDS = {"month": "month", "truck_model": "truckModel", "license_plate": "licensePlate"}
EXPENSE_FILTER_FIELDS = {"month": "month", "supplier": "supplier"}


@dataclass(frozen=True)
class FilterSpec:
    """Exact-match field filters; an empty value leaves that field unconstrained."""
    month: str = None
    truck_model: str = None
    license_plate: str = None
    supplier: str = None

    def update(self, **changes):
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ValueError(f"unknown filter field(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    @property
    def active(self):
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}


def _matches(record, spec, mapping):
    for attr, key in mapping.items():
        wanted = getattr(spec, attr)
        if wanted and record.get(key) != wanted:
            return False
    return True


def filter_truck_logs(logs, spec):
    if not any(getattr(spec, a) for a in TRUCK_FILTER_FIELDS):
        return list(logs)
    return [r for r in logs if _matches(r, spec, TRUCK_FILTER_FIELDS)]


def filter_expenses(expenses, spec):
    if not any(getattr(spec, a) for a in EXPENSE_FILTER_FIELDS):
        return list(expenses)
    return [r for r in expenses if _matches(r, spec, EXPENSE_FILTER_FIELDS)]


def matches_term(record, term):
    needle = term.lower()
    return any(needle in text_value(v).lower() for v in record.values())


def search(records, term):
    """Records containing ``term`` in any field; no term returns ``records`` itself."""
    if not term:
        return records
    return [r for r in records if matches_term(r, term)]


def apply(truck_logs, expenses, spec=None, term=None):
    spec = spec or FilterSpec()
    logs = search(filter_truck_logs(truck_logs, spec), term)
    exps = search(filter_expenses(expenses, spec), term)
    return logs, exps


def options(truck_logs, expenses):
    """Distinct values to offer in the filter widgets."""
    return {
        "month": sorted(({r.get("month") for r in truck_logs} | {r.get("month") for r in expenses})
                        - {None, ""}),
        "truck_model": sorted({r.get("truckModel") for r in truck_logs} - {None, ""}),
        "license_plate": sorted({r.get("licensePlate") for r in truck_logs} - {None, ""}),
        "supplier": sorted({r.get("supplier") for r in expenses} - {None, ""}),
    }
