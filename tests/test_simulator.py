"""
Tests for region clamping and the region simulation.

Test coverage:
    - Region clamping (fractional, negative, out-of-bounds)
    - Record ordering and contents
    - Statistics invariant
    - Corrupted / corrected output buffers
    - Determinism with seeded error sources
    - Degenerate regions
"""

import math
import numpy as np
import pytest

from hamming_image_sim import hamming74 as ham
from hamming_image_sim.channel import RandomErrorSource, ScriptedErrorSource
from hamming_image_sim.simulator import Region, clamp_region, run_on_region
from hamming_image_sim.utils import luma


def make_image(h=6, w=8, seed=0, channels=3):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, channels), dtype=np.uint8)


class TestClampRegion:
    def test_inside(self):
        assert clamp_region(Region(1, 2, 3, 4), 10, 10) == Region(1, 2, 3, 4)

    def test_fractional_floored(self):
        assert clamp_region(Region(1.7, 2.2, 3.9, 4.999), 10, 10) == Region(1, 2, 3, 4)

    def test_negative_origin(self):
        # x clamps to 0 but the width is not extended
        assert clamp_region(Region(-3.5, -1, 5, 5), 10, 10) == Region(0, 0, 5, 5)

    def test_overflow_trimmed(self):
        assert clamp_region(Region(8, 8, 10, 10), 10, 10) == Region(8, 8, 2, 2)

    def test_beyond_image_is_empty(self):
        r = clamp_region(Region(12, 0, 5, 5), 10, 10)
        assert r.width == 0
        assert r.is_empty

    def test_infinite_size_extends_to_edge(self):
        assert clamp_region(Region(1, 2, math.inf, math.inf), 4, 3) == Region(1, 2, 3, 1)

    def test_negative_infinite_origin(self):
        assert clamp_region(Region(-math.inf, 0, 2, 2), 4, 3) == Region(0, 0, 2, 2)

    @pytest.mark.parametrize("region", [
        Region(0, 0, math.nan, 2),
        Region(0, 0, 2, math.nan),
        Region(0, 0, -math.inf, 2),
        Region(math.nan, 0, 2, 2),
        Region(0, math.inf, 2, 2),
    ])
    def test_non_finite_gives_empty(self, region):
        assert clamp_region(region, 4, 3).is_empty

    def test_run_with_infinite_selection(self):
        img = make_image(h=3, w=4)
        res = run_on_region(img, Region(0, 0, math.inf, math.inf), RandomErrorSource(seed=0))
        assert res.region == Region(0, 0, 4, 3)
        assert res.stats.total_codewords == 24

    def test_run_with_nan_selection(self):
        img = make_image(h=3, w=4)
        res = run_on_region(img, Region(0, 0, math.nan, 2), RandomErrorSource(seed=0))
        assert res.status == "region_too_small"
        assert res.records == []

    def test_negative_size_is_zero(self):
        r = clamp_region(Region(2, 2, -4, 3), 10, 10)
        assert r.width == 0 and r.height == 3
        assert r.pixel_count == 0


class TestRunOnRegion:
    def test_statistics_invariant(self):
        img = make_image()
        res = run_on_region(img, Region(1, 1, 5, 3), RandomErrorSource(seed=3))
        n = 2 * 5 * 3
        s = res.stats
        assert s.total_blocks == s.total_codewords == s.errors_introduced == n
        assert s.errors_corrected == s.errors_introduced
        assert len(res.records) == n
        assert res.status == "completed"

    def test_record_order_row_major_high_first(self):
        img = make_image()
        res = run_on_region(img, Region(2, 1, 3, 2), RandomErrorSource(seed=5))
        coords = [(r.x, r.y, r.nibble_index) for r in res.records]
        expected = [(x, y, k) for y in (1, 2) for x in (2, 3, 4) for k in (0, 1)]
        assert coords == expected

    def test_record_contents(self):
        img = make_image()
        res = run_on_region(img, Region(0, 0, 2, 2), ScriptedErrorSource([4]))
        for rec in res.records:
            r, g, b = (int(v) for v in img[rec.y, rec.x, :3])
            assert rec.gray == luma(r, g, b)
            nib = (rec.gray >> 4) & 0xF if rec.nibble_index == 0 else rec.gray & 0xF
            assert rec.data_bits == ham.nibble_to_bits(nib)
            assert rec.codeword == ham.encode(rec.data_bits)
            assert rec.error_bit_index == 4
            assert sum(a != b for a, b in zip(rec.codeword, rec.received)) == 1
            assert rec.decode_result.error_position == 5
            assert rec.decode_result.data_bits == rec.data_bits

    def test_corrected_is_flat_gray_luma(self):
        img = make_image()
        region = Region(1, 1, 4, 4)
        res = run_on_region(img, region, RandomErrorSource(seed=9))
        for y in range(1, 5):
            for x in range(1, 5):
                gray = luma(*(int(v) for v in img[y, x, :3]))
                assert tuple(res.corrected[y, x]) == (gray, gray, gray)

    def test_outside_region_untouched(self):
        img = make_image()
        res = run_on_region(img, Region(2, 2, 2, 2), RandomErrorSource(seed=1))
        mask = np.ones(img.shape[:2], dtype=bool)
        mask[2:4, 2:4] = False
        assert np.array_equal(res.corrected[mask], img[mask])
        assert np.array_equal(res.corrupted[mask], img[mask])

    def test_input_not_mutated(self):
        img = make_image()
        before = img.copy()
        run_on_region(img, Region(0, 0, 8, 6), RandomErrorSource(seed=1))
        assert np.array_equal(img, before)

    def test_corrupted_uses_received_data_positions(self):
        # gray 0 -> both nibbles 0000, codeword all zero
        img = np.zeros((1, 1, 3), dtype=np.uint8)
        # flip d1 (index 2) in the high nibble and p1 (index 0) in the low nibble
        res = run_on_region(img, Region(0, 0, 1, 1), ScriptedErrorSource([2, 0]))
        assert tuple(res.corrupted[0, 0]) == (0x80, 0x80, 0x80)
        assert tuple(res.corrected[0, 0]) == (0, 0, 0)

    def test_parity_flip_leaves_corrupted_unchanged(self):
        img = np.full((1, 1, 3), 200, dtype=np.uint8)
        res = run_on_region(img, Region(0, 0, 1, 1), ScriptedErrorSource([1]))
        assert tuple(res.corrupted[0, 0]) == (200, 200, 200)

    def test_alpha_channel_preserved(self):
        img = make_image(channels=4)
        res = run_on_region(img, Region(0, 0, 8, 6), RandomErrorSource(seed=2))
        assert np.array_equal(res.corrected[..., 3], img[..., 3])
        assert np.array_equal(res.corrupted[..., 3], img[..., 3])

    def test_deterministic_with_seed(self):
        img = make_image()
        a = run_on_region(img, Region(0, 0, 8, 6), RandomErrorSource(seed=11))
        b = run_on_region(img, Region(0, 0, 8, 6), RandomErrorSource(seed=11))
        assert np.array_equal(a.corrected, b.corrected)
        assert np.array_equal(a.corrupted, b.corrupted)
        assert a.records == b.records
        assert a.stats == b.stats

    def test_runs_do_not_alias(self):
        img = make_image()
        a = run_on_region(img, Region(0, 0, 2, 2), RandomErrorSource(seed=1))
        b = run_on_region(img, Region(0, 0, 2, 2), RandomErrorSource(seed=1))
        assert a.corrected is not b.corrected
        assert a.records is not b.records

    def test_accepts_nested_lists(self):
        pixels = [[[255, 255, 255], [0, 0, 0]]]
        res = run_on_region(pixels, Region(0, 0, 2, 1), RandomErrorSource(seed=0))
        assert res.corrected[0, 0, 0] == 255
        assert res.corrected[0, 1, 0] == 0

    def test_bad_shape(self):
        with pytest.raises(ValueError, match="pixel array"):
            run_on_region(np.zeros((4, 4)), Region(0, 0, 2, 2))

    def test_default_error_source(self):
        res = run_on_region(make_image(), Region(0, 0, 3, 3))
        assert res.stats.errors_corrected == 18


class TestDegenerateRegion:
    @pytest.mark.parametrize("region", [
        Region(0, 0, 0, 5),
        Region(0, 0, 5, 0),
        Region(0, 0, 0.9, 3),
        Region(100, 100, 5, 5),
    ])
    def test_empty_result(self, region):
        img = make_image()
        res = run_on_region(img, region, RandomErrorSource(seed=0))
        assert res.records == []
        assert res.stats.total_codewords == 0
        assert res.stats.errors_corrected == 0
        assert res.status == "region_too_small"
        assert res.region_too_small
        assert np.array_equal(res.corrected, img)
        assert np.array_equal(res.corrupted, img)

    def test_inspect_empty_raises(self):
        res = run_on_region(make_image(), Region(0, 0, 0, 0))
        with pytest.raises(IndexError):
            res.inspect(1)


class TestInspect:
    def test_one_based_and_clamped(self):
        res = run_on_region(make_image(), Region(0, 0, 2, 2), RandomErrorSource(seed=4))
        n = len(res.records)
        assert res.inspect(1) is res.records[0]
        assert res.inspect(n) is res.records[-1]
        assert res.inspect(0) is res.records[0]
        assert res.inspect(n + 10) is res.records[-1]
