from .vector import Vector
from .cell import Cell
from .field import Field, GridSpec
from .scalar_field import ScalarField
from .vector_field import VectorField
from .config import AdvectorConfig
from .advector import ParticleAdvector, Particle, Segment, segments_to_geojson

__all__ = [
    "Vector",
    "Cell",
    "Field",
    "GridSpec",
    "ScalarField",
    "VectorField",
    "AdvectorConfig",
    "ParticleAdvector",
    "Particle",
    "Segment",
    "segments_to_geojson",
]
