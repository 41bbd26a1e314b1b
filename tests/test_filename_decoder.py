"""Unit tests for clip filename decoding."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime
from teslacam.services.filename_decoder import decode_clip_name, camera_from_name, timestamp_from_name


class TestCameraFromName:
    def test_each_camera_token(self):
        assert camera_from_name("2026-02-04_10-25-44-front.mp4") == "front"
        assert camera_from_name("2026-02-04_10-25-44-back.mp4") == "back"
        assert camera_from_name("2026-02-04_10-25-44-left_repeater.mp4") == "left_repeater"
        assert camera_from_name("2026-02-04_10-25-44-right_repeater.mp4") == "right_repeater"

    def test_case_insensitive(self):
        assert camera_from_name("2026-02-04_10-25-44-FRONT.MP4") == "front"

    def test_back_wins_over_later_tokens(self):
        assert camera_from_name("front_and_back.mp4") == "back"

    def test_unknown(self):
        assert camera_from_name("clip_unknownformat.mp4") == "unknown"


class TestTimestampFromName:
    def test_standard_name(self):
        assert timestamp_from_name("2026-02-04_10-25-44-back.mp4") == datetime(2026, 2, 4, 10, 25, 44)

    def test_full_path_uses_basename(self):
        ts = timestamp_from_name("/mnt/sentry/2026-02-04_10-25-59/2026-02-04_10-26-44-front.mp4")
        assert ts == datetime(2026, 2, 4, 10, 26, 44)

    def test_unparseable_returns_none(self):
        assert timestamp_from_name("clip_unknownformat.mp4") is None

    def test_invalid_date_returns_none(self):
        assert timestamp_from_name("2026-13-40_10-25-44-back.mp4") is None


def test_decode_clip_name_examples():
    assert decode_clip_name("2026-02-04_10-25-44-back.mp4") == ("back", datetime(2026, 2, 4, 10, 25, 44))
    assert decode_clip_name("clip_unknownformat.mp4") == ("unknown", None)
