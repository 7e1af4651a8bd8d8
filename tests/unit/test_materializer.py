"""Tests for gemini_imagegen.core.materializer — response → file on disk."""

from __future__ import annotations

import base64
from pathlib import Path
from types import SimpleNamespace

import pytest

from gemini_imagegen.core.errors import NoImageInResponse
from gemini_imagegen.core.materializer import (
    build_filename,
    find_inline_image,
    materialize,
    sanitize_prompt,
)


def _materialize(response, output_dir: Path, prompt: str = "A cat!", now_ms: int = 1700000000000):
    return materialize(
        response,
        prompt=prompt,
        model="gemini-3-pro-image-preview",
        aspect_ratio="1:1",
        image_size="large",
        output_directory=output_dir,
        now_ms=now_ms,
    )


class TestFilenames:
    """Verify the timestamped, sanitized output filename scheme."""

    def test_documented_example(self):
        assert build_filename("A cat!", 1700000000000) == "1700000000000_A_cat_.png"

    def test_each_disallowed_character_replaced_once(self):
        assert sanitize_prompt("a b-c..d") == "a_b_c__d"

    def test_non_ascii_replaced(self):
        assert sanitize_prompt("café") == "caf_"

    def test_truncated_to_fifty_characters(self):
        prompt = "x" * 60 + "!"
        assert sanitize_prompt(prompt) == "x" * 50

    def test_truncation_happens_before_substitution(self):
        prompt = "a" * 49 + "!!!"
        assert sanitize_prompt(prompt) == "a" * 49 + "_"


class TestFindInlineImage:
    """Verify first-match extraction of inline image data."""

    def test_skips_text_parts(self, part_factory, response_factory):
        response = response_factory([part_factory(text="caption"), part_factory(b"img")])
        assert find_inline_image(response) == (b"img", "image/png")

    def test_first_candidate_wins(self, part_factory, response_factory):
        response = response_factory(
            [part_factory(b"first")],
            [part_factory(b"second")],
        )
        assert find_inline_image(response)[0] == b"first"

    def test_first_part_within_candidate_wins(self, part_factory, response_factory):
        response = response_factory([part_factory(b"one"), part_factory(b"two", mime_type="image/jpeg")])
        assert find_inline_image(response) == (b"one", "image/png")

    def test_later_candidate_used_when_first_has_no_image(self, part_factory, response_factory):
        response = response_factory([part_factory(text="refused")], [part_factory(b"img")])
        assert find_inline_image(response)[0] == b"img"

    def test_base64_string_payload_decoded(self, part_factory, response_factory):
        encoded = base64.b64encode(b"raw-bytes").decode("ascii")
        response = response_factory([part_factory(encoded)])
        assert find_inline_image(response)[0] == b"raw-bytes"

    def test_missing_structure_treated_as_empty(self):
        assert find_inline_image(SimpleNamespace()) is None
        assert find_inline_image(SimpleNamespace(candidates=None)) is None
        assert find_inline_image(SimpleNamespace(candidates=[SimpleNamespace(content=None)])) is None

    def test_text_only_response(self, part_factory, response_factory):
        assert find_inline_image(response_factory([part_factory(text="no")])) is None


class TestMaterialize:
    """Verify that exactly one file is written, or none at all."""

    def test_writes_file_and_returns_result(self, part_factory, response_factory, output_dir: Path):
        result = _materialize(response_factory([part_factory(b"png-data")]), output_dir)

        expected = output_dir / "1700000000000_A_cat_.png"
        assert result.image_path == expected
        assert expected.read_bytes() == b"png-data"
        assert result.prompt == "A cat!"
        assert result.model == "gemini-3-pro-image-preview"
        assert result.aspect_ratio == "1:1"
        assert result.image_size == "large"

    def test_creates_nested_output_directory(self, part_factory, response_factory, output_dir: Path):
        assert not output_dir.exists()
        _materialize(response_factory([part_factory(b"x")]), output_dir)
        assert output_dir.is_dir()

    def test_existing_output_directory_is_fine(self, part_factory, response_factory, output_dir: Path):
        output_dir.mkdir(parents=True)
        result = _materialize(response_factory([part_factory(b"x")]), output_dir)
        assert result.image_path.exists()

    def test_two_candidates_write_exactly_one_file(self, part_factory, response_factory, output_dir: Path):
        response = response_factory([part_factory(b"first")], [part_factory(b"second")])

        result = _materialize(response, output_dir)

        assert list(output_dir.iterdir()) == [result.image_path]
        assert result.image_path.read_bytes() == b"first"

    def test_no_image_writes_nothing(self, part_factory, response_factory, output_dir: Path):
        with pytest.raises(NoImageInResponse, match="No image data found in response"):
            _materialize(response_factory([part_factory(text="sorry")]), output_dir)
        assert not output_dir.exists()

    def test_same_millisecond_same_prompt_overwrites(self, part_factory, response_factory, output_dir: Path):
        first = _materialize(response_factory([part_factory(b"one")]), output_dir)
        second = _materialize(response_factory([part_factory(b"two")]), output_dir)

        assert first.image_path == second.image_path
        assert second.image_path.read_bytes() == b"two"
        assert len(list(output_dir.iterdir())) == 1

    def test_default_timestamp_is_current_millis(self, part_factory, response_factory, output_dir: Path, monkeypatch):
        monkeypatch.setattr("gemini_imagegen.core.materializer.time.time_ns", lambda: 1_234_567_890_123_456_789)

        result = materialize(
            response_factory([part_factory(b"x")]),
            prompt="hi",
            model="gemini-2.5-flash-image",
            aspect_ratio="16:9",
            image_size="small",
            output_directory=output_dir,
        )

        assert result.image_path.name == "1234567890123_hi.png"
