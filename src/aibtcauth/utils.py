from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def strip_hex_prefix(value: str) -> str:
    return value[2:] if value[:2].lower() == "0x" else value
