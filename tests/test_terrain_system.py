"""
Tests for the layered terrain system.
"""

import math

import pytest

from py_terrain.core.alea_prng import AleaPRNG
from py_terrain.core.colors import Gradient
from py_terrain.core.composition import CompositionMode
from py_terrain.core.details import AGE_RATE, ErosionKind
from py_terrain.core.features import FeatureKind, kind_for_landform
from py_terrain.core.geometry import Landform, Point2D
from py_terrain.core.terrain_system import (
    DepthLayerSpec,
    GenerationResult,
    GenerationStatus,
    SystemState,
    TerrainOptions,
    TerrainSystem,
)

TEST_WIDTH = 800
TEST_HEIGHT = 600
WATER_LEVEL = 400
DEFAULT_SEED = "layered-terrain"
SMALL_RESOLUTION = 40


def small_options(**overrides):
    return TerrainOptions(resolution=SMALL_RESOLUTION, **overrides)


class TestTerrainGeneration:
    """Test full pipeline generation."""

    @pytest.fixture
    def system(self):
        """Create a terrain system on a reduced grid."""
        return TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, seed=DEFAULT_SEED, options=small_options())

    def test_default_layers(self):
        """Test that default options produce three ascending depth layers."""
        system = TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, seed=DEFAULT_SEED, options=TerrainOptions())
        layers = system.get_depth_layers()

        assert [layer.depth for layer in layers] == [0.0, 0.3, 0.6]
        assert [layer.scale for layer in layers] == [1.0, 0.85, 0.7]
        assert [layer.y_offset for layer in layers] == [0.0, 50.0, 100.0]
        assert [layer.terrain_type for layer in layers] == ["coastal", "riverbank", "valley"]

    def test_ready_after_construction(self, system):
        """Test that construction generates terrain synchronously."""
        assert system.state is SystemState.READY
        assert isinstance(system.last_result, GenerationResult)
        assert system.composition is not None
        assert system.last_result.composition == system.composition

    def test_status_matches_features(self, system):
        """Test that the status reflects whether any feature was built."""
        result = system.last_result

        assert result.generated == (result.feature_count > 0)
        assert result.blob_count >= result.feature_count
        assert result.feature_count == sum(len(layer.features) for layer in system.layers)

    def test_feature_invariants(self, system):
        """Test boundaries, layers and kinds of generated features."""
        mode = system.composition.mode
        for layer in system.layers:
            for feature in layer.features:
                assert len(feature.boundary) >= 3
                assert feature.path.is_closed
                assert feature.elevation_layer == layer.depth
                assert feature.kind is kind_for_landform(feature.landform, mode)
                assert feature.reference_height == feature.bounds.min_y

    def test_feature_queries(self, system):
        """Test that feature centroids report a landform."""
        for layer in system.layers:
            for feature in layer.features:
                point = feature.position
                assert system.terrain_type_at(point.x, point.y) in {"cliff", "mountain", "plateau"}
                assert system.height_at(point.x, point.y) <= point.y

    def test_deterministic(self):
        """Test that the same seed produces identical layers."""
        first = TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, seed=DEFAULT_SEED, options=small_options())
        second = TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, seed=DEFAULT_SEED, options=small_options())

        assert first.composition == second.composition
        assert first.layers == second.layers

    def test_injected_prng(self):
        """Test that an injected generator is used and its seed reported."""
        prng = AleaPRNG("injected")
        system = TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, prng=prng, options=small_options())

        assert system.seed == "injected"
        assert prng.call_count > 0

    def test_regenerate_with_seed(self, system):
        """Test reseeding on regeneration."""
        result = system.regenerate(seed="another-seed")

        assert result.seed == "another-seed"
        assert system.last_result is result
        assert system.state is SystemState.READY

    def test_regenerate_with_params(self, system):
        """Test replacing parameters on regeneration."""
        system.regenerate(params={"vegetationDensity": 0.1})
        assert system.params.vegetation_density == 0.1

    def test_layer_paths(self, system):
        """Test that a layer path combines all feature paths."""
        for layer in system.layers:
            expected = sum(len(feature.path.segments) for feature in layer.features)
            assert len(layer.path.segments) == expected

    def test_layer_gradient(self, system):
        """Test layer gradients."""
        gradient = system.layer_gradient(1)

        assert isinstance(gradient, Gradient)
        assert len(gradient.stops) == 3
        assert gradient.start.y == pytest.approx(0.3 * TEST_HEIGHT)


class TestFallbackTerrain:
    """Test behavior when no feature survives extraction."""

    @pytest.fixture
    def system(self):
        """Create a system whose threshold no cell can exceed."""
        options = small_options(height_threshold=1.0)
        return TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, seed=DEFAULT_SEED, options=options)

    def test_fallback_status(self, system):
        """Test that the result is flagged as fallback."""
        result = system.last_result

        assert result.status is GenerationStatus.FALLBACK
        assert not result.generated
        assert result.blob_count == 0
        assert len(system.layers) == 3
        assert all(layer.features == () for layer in system.layers)
        assert system.state is SystemState.READY

    @pytest.mark.parametrize("x,y", [(0, 0), (400, 300), (799, 599), (120, 480)])
    def test_queries_return_water(self, system, x, y):
        """Test that every query sees water."""
        assert system.terrain_type_at(x, y) == "water"
        assert system.height_at(x, y) == WATER_LEVEL

    def test_ground_check(self, system):
        """Test ground detection against the water level."""
        assert system.is_point_on_ground(100, 500)
        assert system.is_point_on_ground(100, WATER_LEVEL)
        assert not system.is_point_on_ground(100, 100)

    def test_update_is_noop(self, system):
        """Test that ticking empty terrain changes nothing."""
        before = system.layers
        system.update(1000.0, 16.0)
        assert system.layers == before


class TestAddTerrainFeature:
    """Test hand-placed features."""

    @pytest.fixture
    def system(self):
        """Create an empty terrain system."""
        options = small_options(height_threshold=1.0)
        return TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, seed=DEFAULT_SEED, options=options)

    @pytest.mark.parametrize("landform", ["cliff", "mountain", "plateau"])
    def test_adds_one_feature(self, system, landform):
        """Test that exactly one feature lands on the foreground layer."""
        before = [len(layer.features) for layer in system.layers]
        feature = system.add_terrain_feature(landform, (400, 300), 50)
        after = [len(layer.features) for layer in system.layers]

        assert after[0] == before[0] + 1
        assert after[1:] == before[1:]
        assert system.layers[0].features[-1] == feature
        assert feature.landform is Landform(landform)
        assert feature.elevation_layer == 0.0

    @pytest.mark.parametrize("landform", ["cliff", "mountain", "plateau"])
    def test_type_at_position(self, system, landform):
        """Test that the new feature answers queries at its position."""
        feature = system.add_terrain_feature(landform, Point2D(400, 300), 50)

        assert system.terrain_type_at(400, 300) == landform
        assert system.height_at(400, 300) == feature.reference_height
        assert system.height_at(400, 300) < 300

    def test_latest_feature_wins(self, system):
        """Test that overlapping features resolve to the newest one."""
        system.add_terrain_feature("plateau", (400, 300), 80)
        system.add_terrain_feature("cliff", (400, 300), 40)

        assert system.terrain_type_at(400, 300) == "cliff"

    def test_template_outline(self, system):
        """Test that the outline surrounds the position at roughly the given size."""
        feature = system.add_terrain_feature("mountain", (400, 300), 50)

        for point in feature.boundary:
            distance = math.hypot(point.x - 400, point.y - 300)
            assert 50 * 0.7 - 1e-6 <= distance <= 50 * 1.1 + 1e-6

    def test_rocks_and_erosion(self, system):
        """Test that a cliff gets rocks and geological erosion."""
        feature = system.add_terrain_feature("cliff", (400, 300), 50)

        assert feature.kind is FeatureKind.CLIFF
        assert 3 <= len(feature.rock_formations) <= 7
        assert all(p.kind is ErosionKind.GEOLOGICAL for p in feature.erosion_patterns)

    def test_non_positive_size(self, system):
        """Test that a zero size is clamped instead of failing."""
        feature = system.add_terrain_feature("plateau", (200, 200), 0)

        assert feature is not None
        assert 0 < feature.size < 5

    def test_unknown_landform(self, system):
        """Test that unknown landforms raise."""
        with pytest.raises(ValueError):
            system.add_terrain_feature("volcano", (400, 300), 50)

    def test_gradient(self, system):
        """Test feature gradients through the facade."""
        feature = system.add_terrain_feature("mountain", (400, 300), 50)
        gradient = system.feature_gradient(feature)

        assert gradient.start.y == feature.bounds.min_y
        assert gradient.end.y == feature.bounds.max_y
        assert all(stop.alpha == 1.0 for stop in gradient.stops)


class TestUpdate:
    """Test per-tick evolution."""

    @pytest.fixture
    def system(self):
        """Create a system with one cliff feature."""
        options = small_options(height_threshold=1.0)
        system = TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, seed=DEFAULT_SEED, options=options)
        system.add_terrain_feature("cliff", (400, 300), 60)
        return system

    def test_geometry_untouched(self, system):
        """Test that ticks never move geometry."""
        before = system.layers[0].features[0]
        system.update(1000.0, 16.0)
        after = system.layers[0].features[0]

        assert after.boundary == before.boundary
        assert after.path == before.path
        assert after.bounds == before.bounds
        assert [r.boundary for r in after.rock_formations] == [r.boundary for r in before.rock_formations]
        assert [p.channels for p in after.erosion_patterns] == [p.channels for p in before.erosion_patterns]

    def test_erosion_ages(self, system):
        """Test that erosion ages advance and activity follows."""
        before = system.layers[0].features[0]
        system.update(1000.0, 16.0)
        after = system.layers[0].features[0]

        for old, new in zip(before.erosion_patterns, after.erosion_patterns):
            assert new.age == pytest.approx(old.age + 16.0 * AGE_RATE)
            assert new.activity == pytest.approx(min(1.0, new.age / 10))

    def test_rock_colors(self, system):
        """Test that rock colors are modulated from their base."""
        system.update(1000.0, 16.0)
        for rock in system.layers[0].features[0].rock_formations:
            h, s, l = rock.base_color
            assert rock.color == pytest.approx((h, s, l * (1 + math.sin(1.0) * 0.1)))


class TestParametersAndOptions:
    """Test parameter overrides and options."""

    def test_params_clamped(self):
        """Test that overrides are clamped into range."""
        system = TerrainSystem(
            TEST_WIDTH,
            TEST_HEIGHT,
            WATER_LEVEL,
            params={"mountainHeight": 5.0, "vegetationDensity": 0.9},
            seed=DEFAULT_SEED,
            options=small_options(),
        )

        assert system.params.mountain_height == 1.0
        assert system.params.vegetation_density == 0.9
        assert system.last_result.params == system.params

    def test_cliff_steepness_override(self):
        """Test that an explicit steepness replaces the composition default."""
        explicit = TerrainSystem(
            TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, params={"cliffSteepness": 0.5}, options=small_options()
        )
        default = TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, options=small_options())

        assert explicit.composition.cliff_steepness == 0.5
        assert default.composition.cliff_steepness == 0.9

    def test_valley_depth(self):
        """Test that a shallow valley lifts the valley floor."""
        system = TerrainSystem(
            TEST_WIDTH,
            TEST_HEIGHT,
            WATER_LEVEL,
            params={"valleyDepth": 0.2},
            options=small_options(composition_weights={"valley": 1.0}),
        )

        assert system.composition.mode is CompositionMode.VALLEY
        assert system.composition.valley_floor == pytest.approx(0.5)

    def test_dimensions_clamped(self):
        """Test that degenerate scene sizes are clamped."""
        system = TerrainSystem(0, -5, 0, options=small_options())

        assert system.width == 1
        assert system.height == 1
        assert system.terrain_type_at(10, 10) in {"water", "cliff", "mountain", "plateau"}

    def test_query_clamping(self):
        """Test that out-of-bounds queries are clamped to the scene."""
        system = TerrainSystem(TEST_WIDTH, TEST_HEIGHT, WATER_LEVEL, seed=DEFAULT_SEED, options=small_options())

        assert system.height_at(-100, -100) == system.height_at(0, 0)
        assert system.terrain_type_at(5000, 5000) == system.terrain_type_at(TEST_WIDTH, TEST_HEIGHT)

    def test_empty_layers_rejected(self):
        """Test that options require at least one layer."""
        with pytest.raises(ValueError):
            TerrainOptions(depth_layers=[])

    def test_layers_sorted(self):
        """Test that layer specs are ordered foreground first."""
        options = TerrainOptions(depth_layers=[(0.8, 0.6, 120.0), DepthLayerSpec(0.1, 1.0, 0.0)])

        assert [spec.depth for spec in options.depth_layers] == [0.1, 0.8]
        assert all(isinstance(spec, DepthLayerSpec) for spec in options.depth_layers)

    def test_unknown_composition_mode(self):
        """Test that unknown composition weights raise."""
        with pytest.raises(ValueError):
            TerrainSystem(
                TEST_WIDTH,
                TEST_HEIGHT,
                WATER_LEVEL,
                options=small_options(composition_weights={"tundra": 1.0}),
            )
