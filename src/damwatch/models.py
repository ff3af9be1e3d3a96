"""
Data models for dam-monitoring sensor points and their observations.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from .exceptions import ValidationError

ONLINE_STATUS = 1

# Characters that would let a point code escape its URL path segment.
POINT_CODE_FORBIDDEN = "/?#\\"

DateLike = Union[date, datetime, str]


class SensorKind(str, Enum):
    """The closed set of sensor kinds installed on the dam."""

    EX = "EX"  # extensometer
    TC = "TC"  # hydrostatic level
    IP = "IP"  # inverted plumb line

    @classmethod
    def coerce(cls, value: Union["SensorKind", str]) -> "SensorKind":
        """Return ``value`` as a SensorKind, raising ValidationError otherwise."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValidationError(
                f"Unknown sensor kind {value!r}",
                details={"allowed": [k.value for k in cls]},
            ) from None


ALL_SENSOR_TYPES = "all"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an API timestamp, accepting a trailing ``Z`` for UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    if "T" not in text and " " not in text:
        return datetime.strptime(text, "%Y-%m-%d")
    return datetime.fromisoformat(text)


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_timestamp(value)
    return parsed.date() if parsed else None


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


@dataclass(frozen=True)
class SensorPoint:
    """A monitoring point as listed in the sensor catalog."""

    code: str
    sensor_type: SensorKind
    height: float
    install_date: Optional[date]
    section: str
    status: int
    updated_at: Optional[datetime]

    @property
    def is_online(self) -> bool:
        return self.status == ONLINE_STATUS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SensorPoint":
        return cls(
            code=str(data["code"]),
            sensor_type=SensorKind.coerce(data["sensor_type"]),
            height=float(data.get("height") or 0.0),
            install_date=parse_date(data.get("install_date")),
            section=str(data.get("section") or ""),
            status=int(data.get("status", 0)),
            updated_at=parse_timestamp(data.get("updated_at")),
        )


@dataclass(frozen=True)
class SensorStats:
    """Server-side aggregate over all observations of one point."""

    sensor_code: str
    first_observation: Optional[datetime]
    last_observation: Optional[datetime]
    total_records: int
    max_value: Optional[float]
    min_value: Optional[float]
    max_observation_time: Optional[datetime]
    min_observation_time: Optional[datetime]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SensorStats":
        return cls(
            sensor_code=str(data["sensor_code"]),
            first_observation=parse_timestamp(data.get("first_observation")),
            last_observation=parse_timestamp(data.get("last_observation")),
            total_records=int(data.get("total_records") or 0),
            max_value=_optional_float(data.get("max_value")),
            min_value=_optional_float(data.get("min_value")),
            max_observation_time=parse_timestamp(data.get("max_observation_time")),
            min_observation_time=parse_timestamp(data.get("min_observation_time")),
        )


@dataclass(frozen=True)
class ExtensometerRecord:
    """A single extensometer (EX) reading."""

    sensor_code: str
    ob_time: datetime
    value: float
    reservoir_level: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtensometerRecord":
        return cls(
            sensor_code=str(data["sensor_code"]),
            ob_time=parse_timestamp(data["ob_time"]),
            value=float(data["value"]),
            reservoir_level=_optional_float(data.get("reservoir_level")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HydrostaticLevelRecord:
    """A single hydrostatic-level (TC) reading."""

    sensor_code: str
    ob_time: datetime
    value: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HydrostaticLevelRecord":
        return cls(
            sensor_code=str(data["sensor_code"]),
            ob_time=parse_timestamp(data["ob_time"]),
            value=float(data["value"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class InvertedPlumbLineRecord:
    """A single inverted plumb line (IP) reading: left/right and up/down offsets."""

    sensor_code: str
    ob_time: datetime
    lr_value: float
    ud_value: float
    reservoir_level: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InvertedPlumbLineRecord":
        return cls(
            sensor_code=str(data["sensor_code"]),
            ob_time=parse_timestamp(data["ob_time"]),
            lr_value=float(data["lr_value"]),
            ud_value=float(data["ud_value"]),
            reservoir_level=_optional_float(data.get("reservoir_level")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


ObservationRecord = Union[
    ExtensometerRecord, HydrostaticLevelRecord, InvertedPlumbLineRecord
]

RECORD_TYPES = {
    SensorKind.EX: ExtensometerRecord,
    SensorKind.TC: HydrostaticLevelRecord,
    SensorKind.IP: InvertedPlumbLineRecord,
}


def _format_bound(value: Optional[DateLike]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


@dataclass(frozen=True)
class ObservationWindow:
    """
    The bounds of a single read request: time range and/or pagination.

    All fields are optional; an empty window asks the API for its default
    range.
    """

    start: Optional[DateLike] = None
    end: Optional[DateLike] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    @classmethod
    def page(cls, page: int, page_size: int, **kwargs: Any) -> "ObservationWindow":
        """Window for a 1-based page index."""
        if page < 1:
            raise ValidationError(f"page must be >= 1, got {page}")
        if page_size < 1:
            raise ValidationError(f"page_size must be >= 1, got {page_size}")
        return cls(limit=page_size, offset=(page - 1) * page_size, **kwargs)

    def validate(self) -> "ObservationWindow":
        """
        Check that the window is well formed.

        Raises:
            ValidationError: On a negative or non-integer limit/offset,
                unparseable start/end, or start later than end.
        """
        for name in ("limit", "offset"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"{name} must be an integer, got {value!r}")
        if self.limit is not None and self.limit < 1:
            raise ValidationError(f"limit must be >= 1, got {self.limit}")
        if self.offset is not None and self.offset < 0:
            raise ValidationError(f"offset must be >= 0, got {self.offset}")

        bounds = {}
        for name in ("start", "end"):
            value = getattr(self, name)
            if value is None:
                continue
            try:
                parsed = parse_timestamp(value)
            except (TypeError, ValueError):
                raise ValidationError(
                    f"{name} is not a valid date or timestamp: {value!r}"
                ) from None
            if parsed is not None:
                bounds[name] = parsed
        if "start" in bounds and "end" in bounds:
            start, end = bounds["start"], bounds["end"]
            if (start.tzinfo is None) == (end.tzinfo is None) and start > end:
                raise ValidationError(
                    "start must not be later than end",
                    details={"start": self.start, "end": self.end},
                )
        return self

    def to_params(self) -> Dict[str, Any]:
        """Query parameters for the API, omitting unset bounds."""
        params = {
            "limit": self.limit,
            "offset": self.offset,
            "start": _format_bound(self.start),
            "end": _format_bound(self.end),
        }
        return {key: value for key, value in params.items() if value is not None}


def validate_point_code(code: Any) -> str:
    """
    Return a stripped point code usable as a single URL path segment.

    Raises:
        ValidationError: If the code is empty, not a string, contains ``/``,
            ``?``, ``#`` or ``\\``, or is a ``.``/``..`` path segment.
    """
    if not isinstance(code, str) or not code.strip():
        raise ValidationError(f"Point code must be a non-empty string, got {code!r}")
    code = code.strip()
    bad = sorted(set(code) & set(POINT_CODE_FORBIDDEN))
    if bad or code in (".", ".."):
        raise ValidationError(
            f"Point code is not a single path segment: {code!r}",
            details={"forbidden": bad or [code]},
        )
    return code


@dataclass(frozen=True)
class UserInfo:
    """Profile of the logged-in dashboard user."""

    id: int
    username: str
    role: str
    phone: Optional[str] = None
    name: Optional[str] = None
    department: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserInfo":
        return cls(
            id=int(data["id"]),
            username=str(data["username"]),
            role=str(data.get("role") or ""),
            phone=data.get("phone"),
            name=data.get("name"),
            department=data.get("department"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
