"""The two record kinds (truck trip logs and expenses) and what each one can do.

Each kind is a ``RecordKind`` entry in ``KINDS``; callers dispatch on the kind
name instead of inspecting record contents.
"""
import re
from collections import namedtuple

from fleetlog import formatting
from fleetlog.errors import ValidationFailure

MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
META_FIELDS = ("id", "createdAt", "updatedAt")

Field = namedtuple("Field", "name column type")
Column = namedtuple("Column", "title weight align")


def km_driven(log):
    return float(log.get("finalKm") or 0) - float(log.get("initialKm") or 0)


def fuel_cost(log):
    return float(log.get("litersFueled") or 0) * float(log.get("fuelPricePerLiter") or 0)


def liters_consumed(log):
    return float(log.get("litersFueled") or 0)


def efficiency(log):
    km, used = km_driven(log), liters_consumed(log)
    if km > 0 and used > 0:
        return km / used
    return 0.0


def _number(raw):
    try:
        return float(str(raw).strip().replace(",", "."))
    except (TypeError, ValueError):
        return 0.0


class RecordKind:
    def __init__(self, name, label, route, table, fields, columns, row):
        self.name = name
        self.label = label
        self.route = route
        self.table = table
        self.fields = fields
        self._columns = columns
        self._row = row

    def __repr__(self):
        return f"RecordKind({self.name!r})"

    @property
    def field_names(self):
        return [f.name for f in self.fields]

    def validate(self, payload, partial=False):
        if not isinstance(payload, dict):
            raise ValidationFailure(f"{self.label} payload must be a JSON object")
        clean = {}
        for f in self.fields:
            if f.name not in payload:
                if not partial:
                    raise ValidationFailure(f"{f.name} is required")
                continue
            value = payload[f.name]
            if value is None:
                raise ValidationFailure(f"{f.name} cannot be null")
            if f.type is float:
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValidationFailure(f"{f.name} must be a number")
                value = float(value)
            elif not isinstance(value, str):
                raise ValidationFailure(f"{f.name} must be a string")
            if f.name == "month" and not MONTH_RE.match(value):
                raise ValidationFailure("month must use the YYYY-MM format")
            clean[f.name] = value
        return clean

    def parse_form(self, form):
        """Turn raw form strings into a payload; unparsable numbers become 0."""
        payload = {}
        for f in self.fields:
            raw = form.get(f.name, "")
            payload[f.name] = _number(raw) if f.type is float else str(raw).strip()
        return payload

    def diff(self, original, payload):
        return {k: v for k, v in payload.items()
                if k in self.field_names and original.get(k) != v}

    def columns(self, report_mode=True):
        cols = list(self._columns)
        if not report_mode:
            cols.append(Column("Ações", 1, "left"))
        return cols

    def row(self, record, report_mode=True):
        cells = list(self._row(record))
        if not report_mode:
            cells.append("editar · excluir")
        return cells


def _truck_row(log):
    return (log.get("licensePlate", ""),
            formatting.km(km_driven(log)),
            formatting.liters(liters_consumed(log)),
            formatting.currency(fuel_cost(log)),
            formatting.km_per_liter(efficiency(log)))


def _expense_row(exp):
    return (exp.get("month", ""), exp.get("supplier", ""), exp.get("description", ""),
            formatting.currency(exp.get("cost")))


TRUCK = RecordKind(
    "truck", "Truck log", "/truck-logs", "truck_logs",
    (Field("truckModel", "truck_model", str),
     Field("licensePlate", "license_plate", str),
     Field("month", "month", str),
     Field("initialKm", "initial_km", float),
     Field("finalKm", "final_km", float),
     Field("fuelPricePerLiter", "fuel_price_per_liter", float),
     Field("litersFueled", "liters_fueled", float),
     Field("idealKmLRoute", "ideal_km_l_route", float),
     Field("route", "route", str),
     Field("gasStation", "gas_station", str)),
    (Column("Placa", 1.2, "left"), Column("KM Rodados", 1.2, "right"),
     Column("Litros", 1, "right"), Column("Total (R$)", 1.3, "right"),
     Column("Média (km/l)", 1.2, "right")),
    _truck_row,
)

EXPENSE = RecordKind(
    "expense", "Expense", "/expenses", "expenses",
    (Field("month", "month", str),
     Field("supplier", "supplier", str),
     Field("description", "description", str),
     Field("cost", "cost", float)),
    (Column("Mês", 0.8, "left"), Column("Fornecedor", 1.4, "left"),
     Column("Descrição", 2.2, "left"), Column("Valor", 1.2, "right")),
    _expense_row,
)

KINDS = {k.name: k for k in (TRUCK, EXPENSE)}


def get_kind(kind):
    if isinstance(kind, RecordKind):
        return kind
    try:
        return KINDS[kind]
    except KeyError:
        raise ValueError(f"unknown record kind: {kind!r}") from None
