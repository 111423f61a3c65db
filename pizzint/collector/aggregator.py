"""Reduce the upstream dashboard payload to a single pizza index.

The index is the plain arithmetic mean of ``current_popularity`` across all
locations. A missing or null popularity counts as 0 and still contributes
to the denominator; the spike thresholds were tuned against that behaviour.
NaN and infinite popularity values are rejected as malformed.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from numbers import Real
from typing import Any

from pizzint.core.exceptions import EmptyPayload, MalformedPayload

POPULARITY_FIELD = "current_popularity"


def parse_payload(body: Any) -> list[dict[str, Any]]:
    """Validate the ``{success, data}`` envelope and return the location list.

    Raises:
        MalformedPayload: If ``success`` is falsy, ``data`` is missing or
            null, or ``data`` is not a list.
    """
    if not isinstance(body, Mapping):
        raise MalformedPayload(
            f"Invalid API response: expected an object, got {type(body).__name__}"
        )
    if not body.get("success") or body.get("data") is None:
        raise MalformedPayload("Invalid API response: unsuccessful or missing data")
    data = body["data"]
    if not isinstance(data, list):
        raise MalformedPayload(
            f"Invalid API response: data must be a list, got {type(data).__name__}"
        )
    return data


def _popularity(location: Any, position: int) -> float:
    if not isinstance(location, Mapping):
        raise MalformedPayload(
            f"Location #{position} is not an object: {type(location).__name__}"
        )
    value = location.get(POPULARITY_FIELD)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedPayload(
            f"Location #{position} has non-numeric {POPULARITY_FIELD}: {value!r}"
        )
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise MalformedPayload(
            f"Location #{position} has non-finite {POPULARITY_FIELD}: {value!r}"
        )
    return number


def calculate_index(locations: Sequence[Any]) -> float:
    """Return the mean popularity over all locations.

    Args:
        locations: Location records, each optionally carrying
            ``current_popularity``.

    Returns:
        Arithmetic mean of popularity-or-zero.

    Raises:
        EmptyPayload: If there are no locations.
        MalformedPayload: If the input is not a sequence of objects with
            finite numeric popularity values.
    """
    if isinstance(locations, (str, bytes)) or not isinstance(locations, Sequence):
        raise MalformedPayload(
            f"Expected a sequence of locations, got {type(locations).__name__}"
        )
    if len(locations) == 0:
        raise EmptyPayload("Upstream returned no locations; index is undefined")

    total = sum(_popularity(loc, i) for i, loc in enumerate(locations))
    index = total / len(locations)
    if not math.isfinite(index):
        raise MalformedPayload("Popularity values overflow the index")
    return index
