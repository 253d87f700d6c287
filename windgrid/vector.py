from dataclasses import dataclass
import math


@dataclass(frozen=True)
class Vector:
    u: float  # eastward component
    v: float  # northward component

    def magnitude(self) -> float:
        return math.hypot(self.u, self.v)

    def direction_to(self) -> float:
        """
        Bearing the vector points towards, in degrees [0, 360).
        N is 0 and E is 90.
        """
        in_degrees = math.degrees(math.atan2(self.u, self.v))
        if in_degrees < 0:
            in_degrees += 360.0
        # atan2 can return -0.0 or a tiny negative that rounds up to 360
        return in_degrees % 360.0

    def direction_from(self) -> float:
        """Bearing the vector comes from (meteorological convention)."""
        return (self.direction_to() + 180.0) % 360.0
