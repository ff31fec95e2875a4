from __future__ import annotations

import random

from excerpt_overlay.layout_calculator import (
    MIN_HEIGHT_CHARS,
    MIN_WIDTH_CHARS,
    FloatingLayout,
    compute_layout,
)


def test_narrow_ratio_clamps_width_to_minimum():
    layout = compute_layout(1000, 800, 10, 20, 0.3, 0.5)
    assert layout == FloatingLayout(width_chars=40, height_chars=20, left=570, top=20)


def test_large_parent_uses_ratio():
    layout = compute_layout(2000, 1200, 10, 20, 0.5, 0.5)
    assert layout.width_chars == 100
    assert layout.height_chars == 30
    assert layout.left == 2000 - 100 * 10 - 30
    assert layout.top == 20


def test_height_minimum_applies_to_small_parents():
    layout = compute_layout(300, 100, 10, 20, 1.0, 1.0)
    assert layout.height_chars == MIN_HEIGHT_CHARS
    assert layout.width_chars == MIN_WIDTH_CHARS
    # Wider than the parent: placement goes negative rather than being clamped.
    assert layout.left == 300 - 400 - 30


def test_fractional_left_rounds_down():
    layout = compute_layout(300.5, 200, 7.5, 20, 0.1, 1.0)
    assert layout.width_chars == MIN_WIDTH_CHARS
    assert layout.left == -30


def test_ratios_are_not_clamped():
    layout = compute_layout(1000, 1000, 10, 10, 2.0, 1.5)
    assert layout.width_chars == 200
    assert layout.height_chars == 150


def test_minimums_and_determinism_for_random_inputs():
    rng = random.Random(42)
    for _ in range(500):
        args = (
            rng.uniform(1, 4000),
            rng.uniform(1, 3000),
            rng.uniform(1, 30),
            rng.uniform(1, 40),
            rng.uniform(1e-6, 1.0),
            rng.uniform(1e-6, 1.0),
        )
        first = compute_layout(*args)
        assert first.width_chars >= MIN_WIDTH_CHARS
        assert first.height_chars >= MIN_HEIGHT_CHARS
        assert first.top == 20
        assert compute_layout(*args) == first


def test_pixel_size_converts_cells():
    layout = FloatingLayout(width_chars=40, height_chars=20, left=0, top=20)
    assert layout.pixel_size(8.5, 17) == (340, 340)
