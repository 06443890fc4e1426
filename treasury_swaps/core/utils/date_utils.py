from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def epoch_seconds_to_utc_datetime(epoch_seconds: int) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
