"""Tests for configuration parsing."""

import json
from pathlib import Path

import pytest

from vmt2vmat.config import Config, parse_texture_extension, parse_version
from vmt2vmat.rules import Source2Version


class TestParsing:
    @pytest.mark.parametrize(
        "value, expected",
        [("hla", Source2Version.HLA), ("CS2", Source2Version.CS2), (" sbox ", Source2Version.SBOX)],
    )
    def test_versions(self, value, expected):
        assert parse_version(value) is expected

    def test_unknown_version_defaults_with_warning(self):
        messages = []
        assert parse_version("dota2", messages.append) is Source2Version.HLA
        assert messages and messages[0].startswith("[WARN]")

    def test_missing_version_defaults_quietly(self):
        messages = []
        assert parse_version(None, messages.append) is Source2Version.HLA
        assert messages == []

    @pytest.mark.parametrize(
        "value, expected",
        [("tga", "tga"), ("PNG", "png"), (".jpg", "jpg"), ("jpeg", "jpg"), ("psd", "tga"), (None, "tga")],
    )
    def test_texture_extensions(self, value, expected):
        assert parse_texture_extension(value) == expected


class TestConfigFile:
    def test_from_json(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text(
            json.dumps(
                {
                    "version": "cs2",
                    "texture_extension": "jpeg",
                    "content_root": "content",
                    "converter_exe": "",
                    "keep_unknown": True,
                    "something_else": 42,
                }
            ),
            encoding="utf-8",
        )
        cfg = Config.from_json(path)
        assert cfg.version is Source2Version.CS2
        assert cfg.texture_extension == "jpg"
        assert cfg.content_root == Path("content")
        assert cfg.converter_exe is None
        assert cfg.keep_unknown
        assert cfg.overwrite

    def test_defaults(self):
        cfg = Config.from_dict({})
        assert cfg.version is Source2Version.HLA
        assert cfg.texture_extension == "tga"
        assert cfg.output_dir is None

    def test_non_object_rejected(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError):
            Config.from_json(path)
