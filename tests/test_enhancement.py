"""
Unit tests for the simulated enhancement engine.

The engine is always built with a zero-length time unit or a recording
sleep function so no test actually waits.
"""

import pytest

from OR_Libs.ImageEditingLib.color_filters import combined_pass, contrast_factor
from OR_Libs.ImageEditingLib.enhancement import (
    EnhancementEngine,
    SimulatedLatency,
    auto_enhance_pixels,
    upscale_pixels,
    upscaled_size,
)
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer


class RecordingSleep:
    """Stands in for time.sleep and records requested durations."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class TestUpscaledSize:
    """Tests for upscaled_size."""

    def test_doubles_under_cap(self):
        assert upscaled_size(900, 900) == (1800, 1800)

    def test_capped_uniformly(self):
        assert upscaled_size(1200, 1200) == (2000, 2000)

    def test_cap_preserves_aspect_ratio(self):
        assert upscaled_size(1200, 600) == (2000, 1000)

    def test_never_shrinks_large_image(self):
        assert upscaled_size(2500, 1000) == (2500, 1000)

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            upscaled_size(0, 10)


class TestPixelMath:
    """Tests for the deterministic part of each enhancement."""

    def test_auto_enhance_matches_combined_pass(self, gradient_buffer):
        expected = combined_pass(gradient_buffer, 25, contrast_factor(30), 1.4)
        assert auto_enhance_pixels(gradient_buffer) == expected

    def test_auto_enhance_keeps_size(self, gradient_buffer):
        assert auto_enhance_pixels(gradient_buffer).size == gradient_buffer.size

    def test_upscale_doubles_small_image(self, gradient_buffer):
        assert upscale_pixels(gradient_buffer).size == (12, 8)

    def test_upscale_respects_custom_cap(self, gradient_buffer):
        assert upscale_pixels(gradient_buffer, max_dimension=9).size == (9, 6)


class TestSimulatedLatency:
    """Tests for SimulatedLatency."""

    def test_waits_units_times_unit_length(self):
        sleep = RecordingSleep()
        SimulatedLatency(3, 0.5, sleep).wait()
        assert sleep.calls == [1.5]

    def test_zero_unit_does_not_sleep(self):
        sleep = RecordingSleep()
        SimulatedLatency(3, 0, sleep).wait()
        assert sleep.calls == []


class TestEnhancementEngine:
    """Tests for EnhancementEngine."""

    def test_auto_enhance_resolves_to_new_buffer(self, gradient_buffer):
        engine = EnhancementEngine(time_unit_seconds=0)
        try:
            result = engine.auto_enhance(gradient_buffer).result(timeout=10)
        finally:
            engine.shutdown()

        assert result == auto_enhance_pixels(gradient_buffer)

    def test_latency_per_operation(self, gradient_buffer):
        sleep = RecordingSleep()
        engine = EnhancementEngine(time_unit_seconds=0.25, sleep=sleep)
        try:
            engine.auto_enhance(gradient_buffer).result(timeout=10)
            engine.upscale(gradient_buffer).result(timeout=10)
        finally:
            engine.shutdown()

        assert sleep.calls == [0.5, 0.75]

    def test_source_is_not_mutated(self, gradient_buffer):
        before = gradient_buffer.copy()
        engine = EnhancementEngine(time_unit_seconds=0)
        try:
            engine.upscale(gradient_buffer).result(timeout=10)
        finally:
            engine.shutdown()

        assert gradient_buffer == before

    def test_rejects_negative_time_unit(self):
        with pytest.raises(ValueError):
            EnhancementEngine(time_unit_seconds=-1)

    def test_rejects_non_buffer(self):
        engine = EnhancementEngine(time_unit_seconds=0)
        try:
            with pytest.raises(TypeError):
                engine.auto_enhance(RasterBuffer.blank(1, 1).data)
        finally:
            engine.shutdown()
