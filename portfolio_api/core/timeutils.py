from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp, the form every datetime column is written in."""
    return datetime.now(timezone.utc)


def start_of_local_day() -> datetime:
    """Server-local midnight of the current day, as aware UTC."""
    local_now = datetime.now().astimezone()
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)
