from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .vector import Vector


@dataclass(frozen=True)
class Cell:
    """
    A grid sample: center (lon, lat), its value and the footprint size.

    value is a float for scalar fields, a Vector for vector fields and
    None where the grid has no data. Equality is structural, so a float
    never equals a Vector.
    """
    center: Tuple[float, float]
    value: Optional[Union[float, Vector]]
    x_size: float
    y_size: Optional[float] = field(default=None)

    def __post_init__(self):
        if self.y_size is None:
            object.__setattr__(self, "y_size", self.x_size)

    @property
    def lon(self) -> float:
        return self.center[0]

    @property
    def lat(self) -> float:
        return self.center[1]

    def bounds(self) -> Tuple[float, float, float, float]:
        """(minlon, minlat, maxlon, maxlat) of the cell footprint."""
        half_x = self.x_size / 2.0
        half_y = self.y_size / 2.0
        return (self.lon - half_x, self.lat - half_y,
                self.lon + half_x, self.lat + half_y)
