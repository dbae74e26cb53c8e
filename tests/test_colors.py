"""Tests for the color compositor."""

import pytest

from py_terrain.config.terrain_palette import DEFAULT_PALETTE
from py_terrain.core.alea_prng import AleaPRNG
from py_terrain.core.colors import (
    ColorCompositor,
    Lighting,
    adjust_color,
    depth_alpha,
    terrain_type_for_depth,
)
from py_terrain.core.details import DetailGenerator
from py_terrain.core.geometry import Bounds, Landform, Point2D
from py_terrain.core.noise_field import NoiseField

SCENE_HEIGHT = 600
FEATURE_BOUNDS = Bounds(100, 200, 300, 350)


class TestColorHelpers:
    """Test color arithmetic."""

    def test_adjust_wraps_hue(self):
        """Test hue wrapping."""
        assert adjust_color((350, 50, 50), h=20) == (10, 50, 50)

    def test_adjust_clamps(self):
        """Test saturation and lightness clamping."""
        assert adjust_color((100, 95, 5), s=20, l=-20) == (100, 100.0, 0.0)

    def test_depth_alpha(self):
        """Test atmospheric fade."""
        assert depth_alpha(0.0) == 1.0
        assert depth_alpha(0.6) == pytest.approx(0.82)

    @pytest.mark.parametrize(
        "depth,terrain_type",
        [
            (0.0, "coastal"),
            (0.3, "riverbank"),
            (0.5, "valley"),
            (0.6, "valley"),
            (0.7, "plateau"),
            (0.9, "mountain"),
        ],
    )
    def test_terrain_type_for_depth(self, depth, terrain_type):
        """Test depth to palette key mapping."""
        assert terrain_type_for_depth(depth) == terrain_type


class TestColorCompositor:
    """Test gradients and palette lookups."""

    @pytest.fixture
    def compositor(self):
        """Create a compositor with the default palette."""
        return ColorCompositor()

    def test_landform_color(self, compositor):
        """Test depth adjustment of landform colors."""
        h, s, l = DEFAULT_PALETTE.landforms["mountain"]

        assert compositor.landform_color(Landform.MOUNTAIN, 0.0) == (h, s, l)
        assert compositor.landform_color("mountain", 1.0) == pytest.approx((h, s - 10, l + 5))

    def test_feature_color(self, compositor):
        """Test feature palette lookup."""
        assert compositor.feature_color("cliff") == DEFAULT_PALETTE.features["cliff"].color

    def test_feature_gradient(self, compositor):
        """Test stops, axis and alpha of a feature gradient."""
        color = (210, 20, 40)
        gradient = compositor.feature_gradient(FEATURE_BOUNDS, color, 0.3)

        assert gradient.start == Point2D(200, 200)
        assert gradient.end == Point2D(200, 350)
        assert [stop.offset for stop in gradient.stops] == [0.0, 0.5, 1.0]
        assert gradient.stops[0].color == (210, 20, 65)
        assert gradient.stops[1].color == color
        assert gradient.stops[2].color == (210, 20, 15)
        for stop in gradient.stops:
            assert stop.alpha == pytest.approx(0.91)

    def test_feature_gradient_lighting(self, compositor):
        """Test that lighting intensity widens the gradient."""
        color = (210, 20, 40)
        gradient = compositor.feature_gradient(FEATURE_BOUNDS, color, 0.0, Lighting(intensity=0.0))

        assert gradient.stops[0].color == (210, 20, 55)
        assert gradient.stops[2].color == (210, 20, 25)

    def test_layer_gradient(self, compositor):
        """Test layer backdrop gradient."""
        palette = DEFAULT_PALETTE.terrain_types["valley"]
        gradient = compositor.layer_gradient("valley", 0.5, SCENE_HEIGHT)

        assert gradient.start.y == pytest.approx(300)
        assert gradient.end.y == pytest.approx(420)
        assert [stop.offset for stop in gradient.stops] == [0.0, 0.3, 1.0]
        assert gradient.stops[0].color == pytest.approx(adjust_color(palette.highlight, l=10))
        assert gradient.stops[1].color == tuple(palette.base)
        assert gradient.stops[2].color == tuple(palette.shadow)

    def test_rock_gradient(self, compositor):
        """Test rock gradient stops."""
        generator = DetailGenerator(NoiseField(5), AleaPRNG("rock-colors"))
        rock = generator.rock_formations([Point2D(0, 0), Point2D(50, 0), Point2D(25, 40)], 60.0)[0]
        gradient = compositor.rock_gradient(rock)

        assert [stop.alpha for stop in gradient.stops] == [0.9, 0.8, 0.7]
        assert gradient.stops[0].color[2] == pytest.approx(rock.color[2] + 10)
        assert gradient.stops[2].color[2] == pytest.approx(rock.color[2] - 10)
