#!/usr/bin/env python3
"""
Simple demo script showing layered terrain generation.
"""

from py_terrain import TerrainSystem, configure_logging
from py_terrain.config import TerrainSettings


def main():
    """Demonstrate terrain generation, queries and ticks."""
    configure_logging(TerrainSettings(log_format="console"))

    print("Py-Terrain Layered Terrain Demo")
    print("=" * 40)

    width, height, water_level = 800, 600, 400

    for seed in ["demo123", "coast", "canyon"]:
        print(f"\nSeed {seed!r}:")
        print("-" * 30)

        system = TerrainSystem(width, height, water_level, params={"erosionStrength": 0.8}, seed=seed)
        result = system.last_result

        print(f"  Composition: {system.composition.mode.value}")
        print(f"  Status: {result.status.value}")
        print(f"  Blobs: {result.blob_count}, features: {result.feature_count}")

        for layer in system.layers:
            kinds = {}
            for feature in layer.features:
                kinds[feature.kind.value] = kinds.get(feature.kind.value, 0) + 1
            summary = ", ".join(f"{kind}={count}" for kind, count in sorted(kinds.items())) or "empty"
            print(f"  Layer depth {layer.depth:.1f} ({layer.terrain_type}): {summary}")

        # Sample a horizontal transect
        samples = []
        for x in range(0, width + 1, 100):
            samples.append(f"{system.terrain_type_at(x, height / 2)[0]}")
        print(f"  Transect at y={height / 2:.0f}: {' '.join(samples)}")

    print("\n\nHand-placed features:")
    print("-" * 30)
    system = TerrainSystem(width, height, water_level, seed="manual")
    for landform, position in [("cliff", (150, 250)), ("mountain", (400, 200)), ("plateau", (650, 300))]:
        feature = system.add_terrain_feature(landform, position, 60)
        print(
            f"  {landform:8s} at {position}: kind={feature.kind.value}, "
            f"rocks={len(feature.rock_formations)}, erosion={len(feature.erosion_patterns)}, "
            f"height_at={system.height_at(*position):.1f}"
        )

    # Advance one second of simulated time in 60 ticks
    for tick in range(60):
        system.update(tick * 16.0, 16.0)

    feature = system.layers[0].features[-1]
    if feature.erosion_patterns:
        pattern = feature.erosion_patterns[0]
        print(f"\n  After 60 ticks: {pattern.kind.value} erosion age={pattern.age:.3f} activity={pattern.activity:.3f}")


if __name__ == "__main__":
    main()
