from datetime import datetime, timezone
from typing import Iterable

CSV_HEADER = ("concept", "amount", "date", "type", "username")
UNKNOWN_USER = "Unknown User"

# Un primer carácter así hace que Excel/Sheets evalúe la celda como fórmula
FORMULA_PREFIXES = ("=", "+", "-", "@", "|", "%")


def sanitize_csv_value(value: str) -> str:
    """Antepone una comilla simple para que la hoja de cálculo lo trate como texto."""
    if value and value[0] in FORMULA_PREFIXES:
        return f"'{value}"
    return value


def quote(value) -> str:
    return '"' + str(value).replace('"', '""') + '"'


def format_amount(amount) -> str:
    """Número sin separadores ni decimales sobrantes: 1000 -> "1000", 1500.5 -> "1500.5"."""
    number = float(amount)
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(number)


def format_date(value: datetime) -> str:
    """ISO-8601 en UTC con milisegundos y sufijo Z."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}Z"


def resolve_username(user) -> str:
    if user is None:
        return UNKNOWN_USER
    if user.name is not None:
        return user.name
    if user.email is not None:
        return user.email
    return UNKNOWN_USER


def movement_row(movement) -> str:
    owner = getattr(movement, "user", None)
    values = [
        sanitize_csv_value(movement.concept),
        format_amount(movement.amount),
        format_date(movement.date),
        getattr(movement.type, "value", movement.type),
        sanitize_csv_value(resolve_username(owner)),
    ]
    return ",".join(quote(value) for value in values)


def generate_movements_csv(movements: Iterable) -> str:
    """CSV de movimientos: cabecera sin comillas y cada campo entre comillas, unidos con \\n."""
    lines = [",".join(CSV_HEADER)]
    lines.extend(movement_row(movement) for movement in movements)
    return "\n".join(lines)
