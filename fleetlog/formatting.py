"""pt-BR number, currency and date formatting used by tables and reports."""
from datetime import date

MONTHS_PT = ("janeiro", "fevereiro", "março", "abril", "maio", "junho", "julho",
             "agosto", "setembro", "outubro", "novembro", "dezembro")


def _localize(text):
    # 1,234.56 -> 1.234,56
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def number(value, max_decimals=3):
    value = float(value or 0)
    text = f"{value:,.{max_decimals}f}"
    if max_decimals:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return _localize(text)


def currency(value):
    value = round(float(value or 0), 2)
    sign = "-" if value < 0 else ""
    return f"{sign}R$ {_localize(f'{abs(value):,.2f}')}"


def decimal(value, places=2):
    return _localize(f"{float(value or 0):.{places}f}")


def km(value):
    return f"{number(value)} km"


def km_per_liter(value):
    return f"{decimal(value)} km/l"


def liters(value):
    return f"{number(value)} L"


def long_date(day=None):
    day = day or date.today()
    return f"{day.day:02d} de {MONTHS_PT[day.month - 1]} de {day.year}"


def text_value(value):
    """Text form of a record field as it is displayed; integral floats drop the ``.0``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
