"""
Placement operation log for debugging and testing.

Records every decision taken during a resolution pass for deterministic
snapshot testing. Each decision is a structured PlacementEvent serialized as
one human-readable line:

    CONFIRM id=weather x=1 y=1 w=3 h=3
    REPOSITION id=clock x=0 y=2 w=3 h=3 from_x=3 from_y=0
    PLACE id=feed x=3 y=2 w=5 h=4
"""

from dataclasses import dataclass, field
import re
from typing import Any, Dict, Hashable, List, Literal, Optional, Tuple

from .types import Vector2


EventKind = Literal["CONFIRM", "REPOSITION", "PLACE"]


# =============================================================================
# Line format
# =============================================================================

_KIND = re.compile(r"(?P<kind>[A-Z][A-Z_]*)")
_FIELD = re.compile(
    r'\s+(?P<key>[a-z_][a-z0-9_]*)=(?P<value>"(?:[^"\\]|\\.)*"|[^\s"]+)'
)
_NEEDS_QUOTES = re.compile(r'[\s="\\]')
_ESCAPE = re.compile(r"\\(.)")


def format_value(value: Any) -> str:
    """Format a value so that parse_value returns it unchanged.

    Strings are quoted whenever the bare text would read back as something
    else: an int, a bool, or a token the line parser would split.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str):
        return format_value(str(value))
    if value and not _NEEDS_QUOTES.search(value) and parse_value(value) == value:
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def parse_value(s: str) -> Any:
    """Parse a single serialized value."""
    if len(s) >= 2 and s[0] == '"' and s[-1] == '"':
        return _ESCAPE.sub(r"\1", s[1:-1])
    if s in ("true", "false"):
        return s == "true"
    try:
        return int(s)
    except ValueError:
        return s


def format_line(kind: str, fields: Dict[str, Any]) -> str:
    """Format a single line: KIND key=value key=value ..."""
    return " ".join(
        [kind] + [f"{key}={format_value(value)}" for key, value in fields.items()]
    )


def parse_line(line: str) -> Tuple[str, Dict[str, Any]]:
    """Parse a single line into (kind, fields)."""
    line = line.strip()
    match = _KIND.match(line)
    if match is None:
        raise ValueError(f"Line does not start with an event kind: {line!r}")

    fields: Dict[str, Any] = {}
    pos = match.end()
    while pos < len(line):
        field_match = _FIELD.match(line, pos)
        if field_match is None:
            raise ValueError(f"Malformed field at column {pos}: {line!r}")
        key = field_match.group("key")
        if key in fields:
            raise ValueError(f"Duplicate field {key!r}: {line!r}")
        fields[key] = parse_value(field_match.group("value"))
        pos = field_match.end()

    return match.group("kind"), fields


# =============================================================================
# Events
# =============================================================================

_RECT_KEYS = ("id", "x", "y", "w", "h")

# Fields allowed per kind; the rect fields are always required
_OPTIONAL_KEYS: Dict[str, Tuple[str, ...]] = {
    "CONFIRM": (),
    "REPOSITION": ("from_x", "from_y"),
    "PLACE": (),
}


@dataclass(frozen=True)
class PlacementEvent:
    """A single structured placement decision."""

    kind: EventKind
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_line(self) -> str:
        return format_line(self.kind, self.fields)

    @classmethod
    def from_line(cls, line: str) -> "PlacementEvent":
        kind, fields = parse_line(line)
        if kind not in _OPTIONAL_KEYS:
            raise ValueError(f"Unknown event kind: {kind!r}")

        missing = [key for key in _RECT_KEYS if key not in fields]
        if missing:
            raise ValueError(f"{kind} event is missing {missing}: {line!r}")
        unknown = set(fields) - set(_RECT_KEYS) - set(_OPTIONAL_KEYS[kind])
        if unknown:
            raise ValueError(f"{kind} event has unknown fields {sorted(unknown)}")
        for key, value in fields.items():
            if key != "id" and (isinstance(value, bool) or not isinstance(value, int)):
                raise ValueError(f"{kind} field {key}={value!r} is not an integer")
        return cls(kind=kind, fields=fields)


def _rect_fields(widget_id: Hashable, position: Vector2, size: Vector2) -> Dict[str, Any]:
    return {
        "id": str(widget_id),
        "x": position.x,
        "y": position.y,
        "w": size.x,
        "h": size.y,
    }


@dataclass
class PlacementLog:
    """Accumulates placement decisions of one or more passes."""

    events: List[PlacementEvent] = field(default_factory=list)

    def emit(self, event: PlacementEvent) -> None:
        self.events.append(event)

    def confirm(self, widget_id: Hashable, position: Vector2, size: Vector2) -> None:
        self.emit(PlacementEvent(
            kind="CONFIRM",
            fields=_rect_fields(widget_id, position, size),
        ))

    def reposition(
        self,
        widget_id: Hashable,
        position: Vector2,
        size: Vector2,
        previous: Optional[Vector2],
    ) -> None:
        fields = _rect_fields(widget_id, position, size)
        if previous is not None:
            fields["from_x"] = previous.x
            fields["from_y"] = previous.y
        self.emit(PlacementEvent(kind="REPOSITION", fields=fields))

    def place(self, widget_id: Hashable, position: Vector2, size: Vector2) -> None:
        self.emit(PlacementEvent(
            kind="PLACE",
            fields=_rect_fields(widget_id, position, size),
        ))

    def kinds(self) -> List[str]:
        return [event.kind for event in self.events]

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_plaintext(self) -> str:
        """Serialize to plaintext - one line per event."""
        if not self.events:
            return ""
        lines = [event.to_line() for event in self.events]
        return "\n".join(lines) + "\n"

    def log_to(self, logger) -> None:
        """Log all events as INFO-level messages."""
        for event in self.events:
            logger.info(f"OPLOG {event.to_line()}")

    @classmethod
    def from_plaintext(cls, text: str) -> "PlacementLog":
        events: List[PlacementEvent] = []
        for line in text.strip().split("\n"):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            events.append(PlacementEvent.from_line(line))
        return cls(events=events)
