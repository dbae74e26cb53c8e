"""
Caller-facing terrain parameter overrides.

Every value lives in [0, 1]. Out-of-range values are clamped rather than
rejected so a bad override can only produce tamer terrain, never an error.
Keys may be given in snake_case or camelCase.
"""

from typing import Any, Mapping, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

logger = structlog.get_logger()

DEFAULT_MOUNTAIN_HEIGHT = 0.8
DEFAULT_VALLEY_DEPTH = 0.4
DEFAULT_EROSION_STRENGTH = 0.6


class TerrainParams(BaseModel):
    """Partial overrides accepted by the terrain system."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    mountain_height: float = Field(
        default=DEFAULT_MOUNTAIN_HEIGHT, description="Overall height gain of the heightmap"
    )
    valley_depth: float = Field(
        default=DEFAULT_VALLEY_DEPTH, description="How completely valley scenes open their center"
    )
    cliff_steepness: float = Field(
        default=0.85, description="Exponent of the cliff composition mask"
    )
    erosion_strength: float = Field(
        default=DEFAULT_EROSION_STRENGTH, description="Scale of erosion channel depth"
    )
    vegetation_density: float = Field(
        default=0.5, description="Passed through untouched for vegetation placement"
    )

    @field_validator(
        "mountain_height",
        "valley_depth",
        "cliff_steepness",
        "erosion_strength",
        "vegetation_density",
        mode="before",
    )
    @classmethod
    def _clamp_unit_interval(cls, value: Any, info) -> float:
        value = float(value)
        if value < 0.0 or value > 1.0:
            clamped = min(1.0, max(0.0, value))
            logger.warning(
                "Terrain parameter out of range, clamping",
                field=info.field_name,
                value=value,
                clamped=clamped,
            )
            return clamped
        return value

    @property
    def height_gain(self) -> float:
        """Heightmap multiplier relative to the default mountain height."""
        return self.mountain_height / DEFAULT_MOUNTAIN_HEIGHT

    @property
    def valley_floor(self) -> float:
        """Residual valley mask at the scene center (0 at the default depth or deeper)."""
        return 1.0 - min(1.0, self.valley_depth / DEFAULT_VALLEY_DEPTH)

    @property
    def erosion_scale(self) -> float:
        """Erosion depth multiplier relative to the default strength."""
        return self.erosion_strength / DEFAULT_EROSION_STRENGTH

    @classmethod
    def from_overrides(
        cls, overrides: Optional[Union["TerrainParams", Mapping[str, Any]]] = None
    ) -> "TerrainParams":
        """
        Build params from a partial mapping, an existing instance, or None.

        Args:
            overrides: Partial parameter overrides

        Returns:
            TerrainParams with defaults filled in
        """
        if overrides is None:
            return cls()
        if isinstance(overrides, cls):
            return overrides
        return cls.model_validate(dict(overrides))
