"""Tests for the comparison facade."""

import base64
import io
import logging

import numpy as np
import pytest
from PIL import Image

from ssimdiff import ComparisonReport, CompareOptions, compare, compare_data
from ssimdiff.buffer import PixelBuffer
from ssimdiff.errors import DecodeError, DimensionMismatchError

REPORT_KEYS = {
    "structuralSimilarityIndex",
    "meanCosineSimilarity",
    "meanAbsoluteErrors",
    "absoluteErrors",
    "squareErrors",
    "meanSquareErrors",
    "channelDistortion",
    "meanChannelDistortion",
    "meanChannelStandardDeviation",
}


def _logo(width=128, height=128):
    """Opaque RGBA fixture: horizontal gradient with a dark block."""
    x = np.linspace(0, 255, width).astype(np.uint8)
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = x
    rgba[..., 1] = x[::-1]
    rgba[..., 2] = 128
    rgba[..., 3] = 255
    rgba[20:50, 30:70, :3] = 10
    return rgba


def _inverted(rgba):
    out = rgba.copy()
    out[..., :3] = 255 - out[..., :3]
    return out


class TestReport:
    def test_to_dict_has_exactly_the_report_fields(self):
        report = compare_data(_logo(), _logo())
        assert set(report.to_dict()) == REPORT_KEYS

    def test_report_is_frozen(self):
        report = compare_data(_logo(), _logo())
        with pytest.raises(AttributeError):
            report.channel_distortion = 3


class TestCompareData:
    def test_identity(self):
        report = compare_data(_logo(), _logo())
        assert report.structural_similarity_index == 1
        assert report.mean_cosine_similarity == 1
        assert report.mean_absolute_errors == [0, 0, 0, 0]
        assert report.absolute_errors == [0, 0, 0, 0]
        assert report.square_errors == [0, 0, 0, 0]
        assert report.mean_square_errors == [0, 0, 0, 0]
        assert report.channel_distortion == 0
        assert report.mean_channel_distortion == 0
        assert report.mean_channel_standard_deviation == 0

    def test_inverted_colours(self):
        logo = _logo()
        report = compare_data(logo, _inverted(logo))
        assert report.structural_similarity_index < 0.1
        assert report.mean_channel_distortion > 0.8
        assert report.absolute_errors[3] == 0
        assert report.mean_channel_standard_deviation >= 0

    def test_structurally_similar(self):
        logo = _logo()
        patched = logo.copy()
        patched[80:100, 10:40, :3] = 250
        report = compare_data(logo, patched)
        assert 0 < report.structural_similarity_index < 1
        assert 0 < report.mean_channel_distortion < 1

    def test_symmetric_errors(self):
        rng = np.random.RandomState(4)
        a = rng.randint(0, 256, (40, 40, 4)).astype(np.uint8)
        b = rng.randint(0, 256, (40, 40, 4)).astype(np.uint8)
        ab = compare_data(a, b)
        ba = compare_data(b, a)
        assert ab.absolute_errors == ba.absolute_errors
        assert ab.square_errors == ba.square_errors
        assert ab.structural_similarity_index == pytest.approx(ba.structural_similarity_index)

    def test_options_reach_ssim(self):
        logo = _logo()
        other = _inverted(logo)
        default = compare_data(logo, other)
        small = compare_data(logo, other, {"windowSize": 8})
        assert small.structural_similarity_index != default.structural_similarity_index

    def test_float_options_from_json(self):
        logo = _logo(32, 32)
        report = compare_data(logo, logo, {"windowSize": 8.0, "bitsPerComponent": 8.0, "fuzz": 0.0})
        assert report.structural_similarity_index == 1
        assert report.channel_distortion == 0

    def test_fuzz_option(self):
        a = np.zeros((1, 2, 4), dtype=np.uint8)
        b = a.copy()
        b[0, 0, 0] = 20
        assert compare_data(a, b).channel_distortion == 0
        assert compare_data(a, b, CompareOptions(fuzz=10)).channel_distortion == 1

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError):
            compare_data(_logo(64, 64), _logo(64, 32))

    def test_accepts_base64_and_images(self):
        logo = _logo(32, 32)
        image = Image.fromarray(logo)
        stream = io.BytesIO()
        image.save(stream, format="PNG")
        blob = base64.b64encode(stream.getvalue()).decode("ascii")

        report = compare_data(blob, image)
        assert report.structural_similarity_index == 1
        assert report.channel_distortion == 0
        assert len(report.absolute_errors) == 4

    def test_accepts_pixel_buffers(self):
        buf = PixelBuffer.from_array(_logo(16, 16)[..., :3])
        report = compare_data(buf, buf)
        assert len(report.mean_square_errors) == 3


class TestDiffMaskOutput:
    def test_mask_written_for_rgba(self, tmp_path):
        out = tmp_path / "diff.png"
        a = _logo(16, 16)
        b = a.copy()
        b[0, 0, :3] = 255 - b[0, 0, :3]
        report = compare_data(a, b, {"outputFileName": str(out)})

        assert report.diff_mask is not None
        with Image.open(out) as written:
            assert written.mode == "RGBA"
            assert written.getpixel((0, 0)) == (255, 0, 0, 255)
            assert written.getpixel((1, 1))[3] == 100

    def test_no_mask_for_rgb(self, tmp_path, caplog):
        out = tmp_path / "diff.png"
        rgb = _logo(16, 16)[..., :3]
        with caplog.at_level(logging.WARNING, logger="ssimdiff.compare"):
            report = compare_data(rgb, rgb, {"outputFileName": str(out)})
        assert report.diff_mask is None
        assert not out.exists()
        assert "Diff mask needs RGBA" in caplog.text


class TestCompareFiles:
    def test_compare_paths(self, tmp_path):
        path_a = tmp_path / "a.png"
        path_b = tmp_path / "b.png"
        Image.fromarray(_logo()).save(path_a)
        Image.fromarray(_inverted(_logo())).save(path_b)

        same = compare(path_a, path_a)
        assert isinstance(same, ComparisonReport)
        assert same.structural_similarity_index == 1

        different = compare(str(path_a), str(path_b))
        assert different.mean_channel_distortion > 0.8

    def test_rgb_files_decode_to_rgba(self, tmp_path):
        path = tmp_path / "rgb.png"
        Image.new("RGB", (8, 8), color=(1, 2, 3)).save(path)
        report = compare(path, path)
        assert report.absolute_errors == [0, 0, 0, 0]

    def test_missing_file_raises(self, tmp_path):
        path = tmp_path / "a.png"
        Image.fromarray(_logo(8, 8)).save(path)
        with pytest.raises(DecodeError):
            compare(path, tmp_path / "missing.png")
