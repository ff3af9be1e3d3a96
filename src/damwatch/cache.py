"""
Per-kind observation buckets backing the chart and table views.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Tuple, Union

from .models import ObservationRecord, SensorKind


class Bucket(str, Enum):
    """The two independent views cached for every sensor kind."""

    CHART = "chart"
    TABLE = "table"


Records = Tuple[ObservationRecord, ...]


class ObservationCache:
    """
    Chart and table buckets for each sensor kind.

    Each mutation touches exactly one (kind, bucket) pair and swaps in a new
    tuple, so a reader sees either the old or the new contents. Records are
    stored in the order given: nothing is sorted or deduplicated here, which
    means appending an overlapping window keeps both copies.
    """

    def __init__(self) -> None:
        self._buckets: Dict[Bucket, Dict[SensorKind, Records]] = {
            bucket: {kind: () for kind in SensorKind} for bucket in Bucket
        }

    def chart(self, kind: Union[SensorKind, str]) -> Records:
        return self._buckets[Bucket.CHART][SensorKind.coerce(kind)]

    def table(self, kind: Union[SensorKind, str]) -> Records:
        return self._buckets[Bucket.TABLE][SensorKind.coerce(kind)]

    def get(self, kind: Union[SensorKind, str], bucket: Union[Bucket, str]) -> Records:
        return self._buckets[Bucket(bucket)][SensorKind.coerce(kind)]

    def replace(self, kind: Union[SensorKind, str], records: Iterable[ObservationRecord]) -> None:
        """chart[kind] := records"""
        self._buckets[Bucket.CHART][SensorKind.coerce(kind)] = tuple(records)

    def append(self, kind: Union[SensorKind, str], records: Iterable[ObservationRecord]) -> None:
        """chart[kind] := chart[kind] ++ records"""
        kind = SensorKind.coerce(kind)
        self._buckets[Bucket.CHART][kind] = self._buckets[Bucket.CHART][kind] + tuple(records)

    def page_replace(
        self, kind: Union[SensorKind, str], records: Iterable[ObservationRecord]
    ) -> None:
        """Same stored effect as :meth:`replace`; used when swapping chart pages."""
        self.replace(kind, records)

    def load_table(
        self, kind: Union[SensorKind, str], records: Iterable[ObservationRecord]
    ) -> None:
        """table[kind] := records"""
        self._buckets[Bucket.TABLE][SensorKind.coerce(kind)] = tuple(records)

    def to_pandas(
        self, kind: Union[SensorKind, str], bucket: Union[Bucket, str] = Bucket.CHART
    ) -> Any:
        """Convert one bucket to a pandas DataFrame, one row per record."""
        return records_to_dataframe(self.get(kind, bucket))


def records_to_dataframe(records: Iterable[ObservationRecord]) -> Any:
    """Build a DataFrame from observation records, with ``ob_time`` as datetimes."""
    try:
        import pandas as pd
    except ImportError:
        raise ImportError(
            "pandas is required for DataFrame conversion. Install with: pip install pandas"
        ) from None

    df = pd.DataFrame([record.to_dict() for record in records])
    if not df.empty:
        df["ob_time"] = pd.to_datetime(df["ob_time"], errors="coerce")
    return df
