from datetime import datetime, timezone


def utc_now() -> datetime:
    """Hora actual en UTC sin tzinfo, el formato de todas las columnas de fecha."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    """Normaliza a UTC sin tzinfo, como se guarda en la base de datos."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
