"""
Go-style duration strings ("1h", "1h30m", "500ms") used by the keepalive flags.
"""

import re
from datetime import timedelta
from decimal import Decimal

_UNIT_MICROSECONDS = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),
    "μs": Decimal(1),
    "ms": Decimal(1000),
    "s": Decimal(1000000),
    "m": Decimal(60 * 1000000),
    "h": Decimal(3600 * 1000000),
}

_COMPONENT_RE = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")

# Largest magnitude a Go time.Duration can hold, about 2562047h.
_MAX_NANOSECONDS = 2 ** 63 - 1


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration such as "1h", "1h30m", "2.5s" or "300ms".

    A bare "0" is accepted. Precision below one microsecond is truncated.

    Raises:
        ValueError: If the text is not a valid duration
    """
    original = text
    text = text.strip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {original!r}")

    total = Decimal(0)
    position = 0
    while position < len(text):
        match = _COMPONENT_RE.match(text, position)
        if not match:
            raise ValueError(f"invalid duration {original!r}")
        total += Decimal(match.group(1)) * _UNIT_MICROSECONDS[match.group(2)]
        position = match.end()

    if total * 1000 > _MAX_NANOSECONDS:
        raise ValueError(f"invalid duration {original!r}")
    return timedelta(microseconds=int(sign * total))


def _trim(number: Decimal) -> str:
    text = format(number, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_duration(value: timedelta) -> str:
    """Render a timedelta the way Go prints a time.Duration, e.g. "1h0m0s"."""
    micros = (value.days * 86400 + value.seconds) * 1000000 + value.microseconds
    if micros == 0:
        return "0s"

    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros < 1000:
        return f"{sign}{micros}µs"
    if micros < 1000000:
        return f"{sign}{_trim(Decimal(micros) / 1000)}ms"

    hours, remainder = divmod(micros, 3600 * 1000000)
    minutes, remainder = divmod(remainder, 60 * 1000000)
    seconds = _trim(Decimal(remainder) / 1000000)

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"
