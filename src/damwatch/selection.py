"""
UI selection state: the chosen point and the sensor-kind filter.

Changing the selection never fetches anything; callers decide what to load.
"""

from typing import Optional, Union

from .models import ALL_SENSOR_TYPES, SensorKind, SensorPoint

SensorTypeFilter = Union[SensorKind, str]


class SelectionState:
    def __init__(self) -> None:
        self.selected_sensor_type: SensorTypeFilter = ALL_SENSOR_TYPES
        self.selected_sensor: Optional[SensorPoint] = None

    def select_sensor(self, point: Optional[SensorPoint]) -> None:
        self.selected_sensor = point

    def set_sensor_type(self, sensor_type: SensorTypeFilter) -> None:
        """Set the filter to ``"all"`` or one sensor kind."""
        if isinstance(sensor_type, str) and sensor_type.lower() == ALL_SENSOR_TYPES:
            self.selected_sensor_type = ALL_SENSOR_TYPES
        else:
            self.selected_sensor_type = SensorKind.coerce(sensor_type)

    def matches(self, point: SensorPoint) -> bool:
        """Whether ``point`` passes the current sensor-kind filter."""
        if self.selected_sensor_type == ALL_SENSOR_TYPES:
            return True
        return point.sensor_type is self.selected_sensor_type
