from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        candidate = value.strip().replace(" ", "T", 1)
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(candidate)
        except ValueError:
            for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M:%S.%f"):
                try:
                    moment = datetime.strptime(value.strip(), fmt)
                    break
                except ValueError:
                    continue
            else:
                raise ValueError(f"Unsupported datetime value: {value!r}") from None
    else:
        raise ValueError(f"Unsupported datetime value: {value!r}")

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def format_relative_time(value: datetime | str, *, now: datetime | None = None) -> str:
    """Describe how long ago ``value`` was, in Vietnamese."""
    reference = coerce_datetime(now) if now is not None else utcnow()
    moment = coerce_datetime(value)

    total_seconds = int((reference - moment).total_seconds())

    if total_seconds < 60:
        return "vừa xong"

    minutes = total_seconds // 60
    if minutes < 60:
        return f"{minutes} phút trước"

    hours = minutes // 60
    if hours < 24:
        return f"{hours} giờ trước"

    days = hours // 24
    if days == 1:
        return "hôm qua"
    if days < 7:
        return f"{days} ngày trước"

    weeks = days // 7
    if weeks < 5:
        return f"{weeks} tuần trước"

    months = days // 30
    if months < 12:
        return f"{max(months, 1)} tháng trước"

    return f"{days // 365} năm trước"
