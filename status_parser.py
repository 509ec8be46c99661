"""Parse Shelly Gen2 Shelly.GetStatus payloads into relay/meter readings.

Only the addressed switch channel is read:

    {"switch:0": {"output": true, "apower": 42.6, "aenergy": {"total": 1.5}}}

A missing channel object, or a relay/power field of the wrong type, fails the
whole read. Absent relay/power fields and anything wrong with the energy total
only make that one value UNKNOWN.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from state import Known, UNKNOWN

log = logging.getLogger(__name__)


class StatusParseError(ValueError):
    """Payload does not have the expected switch channel shape."""


@dataclass(frozen=True)
class ParsedStatus:
    relay: Any           # Known(bool) | UNKNOWN
    active_power: Any    # Known(int) W | UNKNOWN
    active_energy: Any   # Known(int) minute-resolution Wh | UNKNOWN


def round_half_up(value):
    """Round to the nearest integer, halves away from -inf (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def kwh_to_minute_wh(total_kwh):
    """kWh -> whole Wh -> minute-resolution accumulator (integer division by 60)."""
    return round_half_up(total_kwh * 1000) // 60


def _is_number(value):
    # bool is an int subclass but is not a JSON number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_energy(channel, key):
    aenergy = channel.get("aenergy")
    if not isinstance(aenergy, dict):
        log.debug("%s: no aenergy object", key)
        return UNKNOWN
    total = aenergy.get("total")
    if not _is_number(total):
        log.debug("%s: aenergy.total missing or not numeric (%r)", key, total)
        return UNKNOWN
    try:
        if not math.isfinite(total):
            raise OverflowError(total)
        return Known(kwh_to_minute_wh(total))
    except OverflowError:
        log.debug("%s: aenergy.total out of range (%r)", key, total)
        return UNKNOWN


def parse_status(payload, relay_index=0) -> ParsedStatus:
    """Extract relay state, active power and energy for one switch channel.

    Raises StatusParseError if the channel object is missing or if output /
    apower are present with the wrong type.
    """
    key = f"switch:{relay_index}"
    if not isinstance(payload, dict):
        raise StatusParseError(f"status payload is {type(payload).__name__}, not an object")

    channel = payload.get(key)
    if not isinstance(channel, dict):
        raise StatusParseError(f"'{key}' missing or not an object")

    output = channel.get("output")
    if output is None:
        relay = UNKNOWN
    elif isinstance(output, bool):
        relay = Known(output)
    else:
        raise StatusParseError(f"'{key}.output' is not a boolean: {output!r}")

    apower = channel.get("apower")
    if apower is None:
        active_power = UNKNOWN
    elif _is_number(apower):
        try:
            if not math.isfinite(apower):
                raise OverflowError(apower)
            active_power = Known(round_half_up(apower))
        except OverflowError as e:
            raise StatusParseError(f"'{key}.apower' out of range: {apower!r}") from e
    else:
        raise StatusParseError(f"'{key}.apower' is not a number: {apower!r}")

    return ParsedStatus(
        relay=relay,
        active_power=active_power,
        active_energy=_parse_energy(channel, key),
    )
