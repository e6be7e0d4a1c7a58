"""Pytest configuration for Whitted tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear shapes, materials, lights and shading settings around each test."""
    # Import here so fields are created after ti.init
    from src.whitted.core.config import ShadingConfig, apply_shading_config
    from src.whitted.materials.phong import clear_phong_materials
    from src.whitted.materials.reflection import clear_reflection_materials
    from src.whitted.materials.refraction import clear_refraction_materials
    from src.whitted.scene.intersection import clear_scene
    from src.whitted.scene.lights import clear_lights
    from src.whitted.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lights()
        clear_phong_materials()
        clear_reflection_materials()
        clear_refraction_materials()
        _clear_material_tracking()
        apply_shading_config(ShadingConfig())

    _clear_all()

    yield

    _clear_all()
