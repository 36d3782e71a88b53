"""Tests for docfield.settings."""
from __future__ import annotations

from pathlib import Path

import pytest

from docfield.io_utils import save_json
from docfield.settings import (
    DEFAULT_SETTINGS,
    CodecSettings,
    build_classifier,
    load_settings,
    settings_from_dict,
)


class TestCodecSettings:
    def test_defaults(self) -> None:
        assert DEFAULT_SETTINGS.accept_object_grammar is True
        assert DEFAULT_SETTINGS.max_value_depth == 64
        assert DEFAULT_SETTINGS.extra_metadata_fields == ()

    @pytest.mark.parametrize("depth", [0, 65])
    def test_depth_bounds(self, depth: int) -> None:
        with pytest.raises(ValueError, match="max_value_depth"):
            CodecSettings(max_value_depth=depth)

    def test_negative_collection_size(self) -> None:
        with pytest.raises(ValueError, match="max_collection_size"):
            CodecSettings(max_collection_size=-1)

    def test_empty_extra_name(self) -> None:
        with pytest.raises(ValueError, match="extra_metadata_fields"):
            CodecSettings(extra_metadata_fields=("",))


class TestSettingsFromDict:
    def test_full_payload(self) -> None:
        settings = settings_from_dict({
            "accept_object_grammar": False,
            "max_value_depth": 8,
            "max_collection_size": 10,
            "extra_metadata_fields": ["_tier"],
        })
        assert settings == CodecSettings(
            accept_object_grammar=False,
            max_value_depth=8,
            max_collection_size=10,
            extra_metadata_fields=("_tier",),
        )

    def test_unknown_key(self) -> None:
        with pytest.raises(ValueError, match="Unknown settings keys: bogus"):
            settings_from_dict({"bogus": 1})

    def test_wrong_type(self) -> None:
        with pytest.raises(ValueError, match="accept_object_grammar"):
            settings_from_dict({"accept_object_grammar": "yes"})

    def test_bool_is_not_a_count(self) -> None:
        with pytest.raises(ValueError, match="max_value_depth"):
            settings_from_dict({"max_value_depth": True})


class TestLoadSettings:
    def test_round_trip_through_file(self, tmp_path: Path) -> None:
        path = tmp_path / "conf" / "docfield.json"
        save_json({"accept_object_grammar": False}, path)
        assert load_settings(path).accept_object_grammar is False

    def test_non_object_file(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        save_json([1, 2], path)
        with pytest.raises(ValueError, match="JSON object"):
            load_settings(path)


class TestBuildClassifier:
    def test_extra_names_are_builtin(self) -> None:
        classifier = build_classifier(CodecSettings(extra_metadata_fields=("_tier",)))
        assert classifier.is_metadata("_tier") is True
        assert classifier.is_metadata("_id") is True
        assert classifier.is_metadata("_source") is True
        assert classifier.is_metadata("title") is False
