"""Tests for PSNR and data-bit error tallies."""

import math
import numpy as np

from hamming_image_sim.channel import RandomErrorSource, ScriptedErrorSource
from hamming_image_sim.metrics import psnr, region_psnr, data_bit_errors
from hamming_image_sim.simulator import Region, run_on_region


class TestPSNR:
    def test_identical_is_inf(self):
        a = np.full((4, 4), 10, np.uint8)
        assert psnr(a, a) == float("inf")

    def test_known_value(self):
        a = np.zeros((2, 2), np.uint8)
        b = np.full((2, 2), 255, np.uint8)
        assert math.isclose(psnr(a, b), 0.0, abs_tol=1e-9)

    def test_empty_is_nan(self):
        assert math.isnan(psnr(np.zeros(0), np.zeros(0)))


class TestRegionMetrics:
    def test_corrected_region_is_lossless_on_luma(self):
        img = np.random.default_rng(0).integers(0, 256, (5, 5, 3), dtype=np.uint8)
        res = run_on_region(img, Region(0, 0, 5, 5), RandomErrorSource(seed=8))
        assert region_psnr(img, res.corrected, res.region) == float("inf")

    def test_data_bit_errors(self):
        img = np.zeros((1, 2, 3), np.uint8)
        # data flip, parity flip, data flip, parity flip
        res = run_on_region(img, Region(0, 0, 2, 1), ScriptedErrorSource([2, 0, 6, 3]))
        raw, residual = data_bit_errors(res.records)
        assert raw == 2
        assert residual == 0

    def test_corrupted_psnr_finite_when_data_hit(self):
        img = np.zeros((1, 1, 3), np.uint8)
        res = run_on_region(img, Region(0, 0, 1, 1), ScriptedErrorSource([2, 2]))
        assert math.isfinite(region_psnr(img, res.corrupted, res.region))
