from pathlib import Path
from typing import Dict

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

import os

# Load .env for local/dev environments only for values missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class TerrainSettings(BaseSettings):
    """Library settings pulled from TERRAIN_* environment variables."""

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    # Seeding
    default_seed: str = Field(default="terrain", description="Seed used when none is supplied")

    # Heightmap Configuration
    resolution: int = Field(default=100, description="Heightmap cells per side")
    base_frequency: float = Field(default=0.05, description="Noise frequency per grid cell")
    octaves: int = Field(default=3, description="Noise octaves summed per cell")
    complexity: float = Field(default=1.0, description="Frequency multiplier for every octave")
    amplitude_falloff: float = Field(default=1.2, description="Octave amplitude exponent p in 1/f^p")

    # Feature Extraction Configuration
    height_threshold: float = Field(default=0.2, description="Minimum height for a flood-fill seed")
    region_epsilon: float = Field(default=0.2, description="Max height difference to the seed cell")
    min_blob_points: int = Field(default=6, description="Smallest blob kept as a feature")

    # Composition Configuration
    coastal_weight: float = Field(default=0.4, description="Relative weight of coastal scenes")
    valley_weight: float = Field(default=0.3, description="Relative weight of valley scenes")
    cliff_weight: float = Field(default=0.3, description="Relative weight of cliff scenes")

    # Detail Configuration
    max_texture_samples: int = Field(default=200, description="Cap on texture candidates per rock")

    @property
    def composition_weights(self) -> Dict[str, float]:
        """Composition mode weights keyed by mode name."""
        return {
            "coastal": self.coastal_weight,
            "valley": self.valley_weight,
            "cliff": self.cliff_weight,
        }

    class Config:
        env_prefix = "TERRAIN_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate singleton settings object
settings = TerrainSettings()
