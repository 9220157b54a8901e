"""
Parameter selection state.

Holds the indicator, market and horizon the user is looking at. The store is
the single mutation entry point for the selection; everything that depends on
the selection subscribes to it and is told which fields changed.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional, Union
from urllib.parse import parse_qs, urlsplit

import structlog

from ..errors import InvalidSelection

logger = structlog.get_logger(__name__)

INDICATORS = ("CPI", "NFP", "ISM PMI")
MARKETS = ("S&P 500", "Dollar Index", "10Y Bonds", "VIX")
HORIZONS = ("Same day", "Next day", "Day 3", "Week later")


class ParameterField(str, Enum):
    """Selectable parameter fields."""
    INDICATOR = "indicator"
    MARKET = "market"
    HORIZON = "horizon"


DOMAINS: dict[ParameterField, tuple[str, ...]] = {
    ParameterField.INDICATOR: INDICATORS,
    ParameterField.MARKET: MARKETS,
    ParameterField.HORIZON: HORIZONS,
}


@dataclass(frozen=True)
class Parameters:
    """One consistent snapshot of the selection."""
    indicator: str = "CPI"
    market: str = "S&P 500"
    horizon: str = "Same day"

    def get(self, field: ParameterField) -> str:
        return getattr(self, field.value)

    def with_value(self, field: ParameterField, value: str) -> "Parameters":
        return replace(self, **{field.value: value})

    def project(self, fields: Iterable[ParameterField]) -> tuple[str, ...]:
        """Values of the given fields, in the given order."""
        return tuple(self.get(field) for field in fields)

    def changed_fields(self, other: "Parameters") -> frozenset[ParameterField]:
        return frozenset(
            field for field in ParameterField if self.get(field) != other.get(field)
        )


DEFAULT_PARAMETERS = Parameters()

SelectionListener = Callable[[Parameters, Parameters, frozenset[ParameterField]], None]


def coerce_field(field: Union[ParameterField, str]) -> ParameterField:
    """Resolve a field name, raising InvalidSelection for unknown fields."""
    if isinstance(field, ParameterField):
        return field
    try:
        return ParameterField(field)
    except ValueError:
        raise InvalidSelection(
            f"Unknown parameter field: {field!r}",
            field=str(field),
            allowed=[f.value for f in ParameterField]
        ) from None


def validate_selection(field: Union[ParameterField, str], value: object) -> ParameterField:
    """Check that value belongs to the field's domain."""
    resolved = coerce_field(field)
    allowed = DOMAINS[resolved]
    if value not in allowed:
        raise InvalidSelection(
            f"{value!r} is not a valid {resolved.value}",
            field=resolved.value,
            value=value,
            allowed=allowed
        )
    return resolved


def parameters_from_query(
    query: Union[str, Mapping[str, object], None],
    defaults: Parameters = DEFAULT_PARAMETERS
) -> Parameters:
    """
    Build Parameters from a deep link.

    Accepts a full URL, a bare query string, or an already parsed mapping.
    Absent or invalid values fall back to the defaults field by field.
    """
    if query is None:
        return defaults

    if isinstance(query, str):
        query_string = urlsplit(query).query if "?" in query or "://" in query else query
        parsed = {key: values[0] for key, values in parse_qs(query_string).items() if values}
    else:
        parsed = {
            key: (value[0] if isinstance(value, (list, tuple)) and value else value)
            for key, value in query.items()
        }

    params = defaults
    for field in ParameterField:
        value = parsed.get(field.value)
        if value is None:
            continue
        if value in DOMAINS[field]:
            params = params.with_value(field, value)
        else:
            logger.warning(
                "Ignoring invalid deep link parameter",
                field=field.value,
                value=value,
                fallback=params.get(field)
            )
    return params


class ParameterStore:
    """Owns the current selection and notifies subscribers of changes."""

    def __init__(self, initial: Optional[Parameters] = None):
        if initial is not None:
            for field in ParameterField:
                validate_selection(field, initial.get(field))
        self._current = initial or DEFAULT_PARAMETERS
        self._listeners: list[SelectionListener] = []

    @classmethod
    def from_query(
        cls,
        query: Union[str, Mapping[str, object], None],
        defaults: Parameters = DEFAULT_PARAMETERS
    ) -> "ParameterStore":
        """Create a store seeded from a URL or query string."""
        return cls(parameters_from_query(query, defaults))

    @property
    def current(self) -> Parameters:
        return self._current

    def get(self, field: Union[ParameterField, str]) -> str:
        return self._current.get(coerce_field(field))

    def select(self, field: Union[ParameterField, str], value: str) -> bool:
        """
        Set one field of the selection.

        Returns:
            True if the selection changed, False if value was already selected

        Raises:
            InvalidSelection: If field is unknown or value is outside its domain
        """
        resolved = validate_selection(field, value)

        if self._current.get(resolved) == value:
            return False

        previous = self._current
        self._current = previous.with_value(resolved, value)

        logger.info(
            "Parameter selected",
            field=resolved.value,
            old_value=previous.get(resolved),
            new_value=value
        )

        changed = frozenset({resolved})
        for listener in list(self._listeners):
            listener(previous, self._current, changed)
        return True

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
