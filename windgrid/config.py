from dataclasses import dataclass

@dataclass
class AdvectorConfig:
    paths: int = 800               # particle pool size
    max_age: int = 200             # ticks before a particle respawns
    velocity_scale: float = 1 / 5000  # degrees per (field unit * tick)
    duration_ms: int = 20          # scheduler pacing between ticks
    interpolate: bool = False      # sample bilinear instead of nearest cell
    respawn_attempts: int = 10     # random draws looking for a valid cell

    def __post_init__(self):
        if self.paths < 0:
            raise ValueError(f"paths must be >= 0, got {self.paths}")
        if self.max_age < 1:
            raise ValueError(f"max_age must be >= 1, got {self.max_age}")
        if self.respawn_attempts < 1:
            raise ValueError(f"respawn_attempts must be >= 1, got {self.respawn_attempts}")
