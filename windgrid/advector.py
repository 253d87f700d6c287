"""
Particle advection over a VectorField, one tick at a time.

The advector owns a fixed pool of particles. Each tick it samples the field
at every particle, works out the next position (forward Euler step scaled
by velocity_scale) and expires particles that have nowhere valid to go.
The caller (a rendering loop) reads the resulting segments and draws them.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import AdvectorConfig
from .utils_grid import bbox_contains
from .vector_field import VectorField

logger = logging.getLogger(__name__)


@dataclass
class Particle:
    x: float   # lon
    y: float   # lat
    xt: float  # next lon
    yt: float  # next lat
    age: int = 0
    magnitude: float = 0.0


@dataclass(frozen=True)
class Segment:
    x0: float
    y0: float
    x1: float
    y1: float
    magnitude: float


class ParticleAdvector:
    def __init__(
        self,
        field: VectorField,
        config: Optional[AdvectorConfig] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        self.field = field
        self.config = config or AdvectorConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.ticks = 0
        self._particles: List[Particle] = self._prepare_particles()
        logger.debug("Advector ready: %d particles, max_age=%d", len(self._particles), self.config.max_age)

    @property
    def particles(self) -> Tuple[Particle, ...]:
        return tuple(self._particles)

    @property
    def max_age(self) -> int:
        return self.config.max_age

    def _prepare_particles(self) -> List[Particle]:
        parts = []
        for _ in range(self.config.paths):
            x, y = self._random_valid_position()
            age = int(self.rng.integers(0, self.config.max_age))
            parts.append(Particle(x=x, y=y, xt=x, yt=y, age=age))
        return parts

    def _random_valid_position(self) -> Tuple[float, float]:
        pos = None
        for _ in range(self.config.respawn_attempts):
            pos = self.field.random_position(self.rng)
            if self.field.has_value_at(*pos):
                break
        return pos

    def _sample(self, lon: float, lat: float):
        if self.config.interpolate:
            return self.field.interpolated_value_at(lon, lat)
        return self.field.value_at(lon, lat)

    def _respawn(self, p: Particle):
        p.x, p.y = self._random_valid_position()
        p.xt, p.yt = p.x, p.y
        p.age = 0
        p.magnitude = 0.0

    def step(self):
        """Move every particle forward by one tick."""
        max_age = self.config.max_age
        scale = self.config.velocity_scale
        expired = 0

        for p in self._particles:
            if p.age > max_age:
                # restart, on a random x,y
                self._respawn(p)
                continue

            vector = self._sample(p.x, p.y)
            if vector is None:
                p.age = max_age
                expired += 1
            else:
                # the next point will be...
                xt = p.x + vector.u * scale
                yt = p.y + vector.v * scale

                if self.field.has_value_at(xt, yt):
                    p.xt = xt
                    p.yt = yt
                    p.magnitude = vector.magnitude()
                else:
                    # leaving valid data
                    p.age = max_age
                    expired += 1
            p.age += 1

        self.ticks += 1
        if expired:
            logger.debug("tick %d: %d particles expired", self.ticks, expired)

    def segments(self, bounds: Optional[Sequence[float]] = None) -> List[Segment]:
        """
        Segments (x, y) -> (xt, yt) for live particles inside bounds
        (minlon, minlat, maxlon, maxlat). Emitted particles move to (xt, yt).
        """
        out = []
        for p in self._particles:
            if p.age > self.config.max_age:
                continue
            if bounds is not None and not bbox_contains(bounds, p.x, p.y):
                continue

            out.append(Segment(p.x, p.y, p.xt, p.yt, p.magnitude))

            # next-step movement
            p.x = p.xt
            p.y = p.yt
        return out

    def tick(self, bounds: Optional[Sequence[float]] = None) -> List[Segment]:
        self.step()
        return self.segments(bounds)


# ---------------------------
# GeoJSON writers (optional)
# ---------------------------

def segments_to_geojson(segments: Sequence[Segment]) -> dict:
    feats = []
    for s in segments:
        feats.append({
            "type": "Feature",
            "properties": {"magnitude": float(s.magnitude)},
            "geometry": {
                "type": "LineString",
                "coordinates": [[float(s.x0), float(s.y0)], [float(s.x1), float(s.y1)]],
            },
        })
    return {"type": "FeatureCollection", "features": feats}
