"""End-to-end tests for the command line driver."""

import json

import pytest
from PIL import Image

from vmt2vmat.cli import FAILURE_LOG, build_parser, config_from_args, guess_content_root, main, run
from vmt2vmat.config import Config
from vmt2vmat.emit import SHADER_FAULT_MARKER
from vmt2vmat.rules import Source2Version

GOOD_VMT = '"VertexLitGeneric"\n{\n\t"$basetexture" "props/crate"\n\t"$surfaceprop" "wood"\n}\n'
BAD_VMT = '"Refract"\n{\n\t"$normalmap" "glass/n"\n}\n'


@pytest.fixture
def materials(tmp_path):
    root = tmp_path / "content" / "materials"
    (root / "props").mkdir(parents=True)
    (root / "props" / "crate.vmt").write_text(GOOD_VMT, encoding="utf-8")
    (root / "glass.vmt").write_text(BAD_VMT, encoding="utf-8")
    return root


class TestRun:
    def test_batch_writes_next_to_inputs(self, materials):
        messages = []
        rc = run(Config(), materials, logger=messages.append)
        assert rc == 1

        good = (materials / "props" / "crate.vmat").read_text(encoding="utf-8")
        assert 'shader "vr_complex.vfx"' in good
        assert 'TextureColor "materials/props/crate.tga"' in good
        assert 'PhysicsSurfaceProperties "prop.wood"' in good

        bad = (materials / "glass.vmat").read_text(encoding="utf-8")
        assert SHADER_FAULT_MARKER in bad
        assert "TextureNormal" not in bad

        failures = (materials / FAILURE_LOG).read_text(encoding="utf-8")
        assert "glass.vmt" in failures
        assert "crate.vmt" not in failures
        assert messages[-1].startswith("[DONE]")

    def test_output_dir_keeps_layout(self, materials, tmp_path):
        out = tmp_path / "out"
        run(Config(output_dir=out, version=Source2Version.CS2), materials, logger=lambda m: None)
        text = (out / "props" / "crate.vmat").read_text(encoding="utf-8")
        assert 'shader "complex.vfx"' in text
        assert (out / FAILURE_LOG).exists()

    def test_dry_run(self, materials):
        run(Config(dry_run=True), materials, logger=lambda m: None)
        assert not (materials / "props" / "crate.vmat").exists()
        assert not (materials / FAILURE_LOG).exists()

    def test_dry_run_reports_textures(self, materials, tmp_path):
        Image.new("RGBA", (2, 2), (1, 2, 3, 255)).save(materials / "props" / "crate.png")
        out = tmp_path / "out"
        messages = []
        run(Config(dry_run=True, convert_textures=True, output_dir=out), materials / "props" / "crate.vmt",
            logger=messages.append)
        assert any(m.startswith("[TEX] (dry run)") and "crate.png" in m for m in messages)
        assert not out.exists()

    def test_no_overwrite(self, materials):
        existing = materials / "props" / "crate.vmat"
        existing.write_text("keep me", encoding="utf-8")
        run(Config(overwrite=False), materials / "props", logger=lambda m: None)
        assert existing.read_text(encoding="utf-8") == "keep me"

    def test_missing_input(self, tmp_path):
        with pytest.raises(SystemExit):
            run(Config(), tmp_path / "nope.vmt", logger=lambda m: None)

    def test_convert_textures(self, materials, tmp_path):
        Image.new("RGBA", (2, 2), (1, 2, 3, 255)).save(materials / "props" / "crate.png")
        rc = run(Config(convert_textures=True, texture_extension="png"), materials / "props" / "crate.vmt",
                 logger=lambda m: None)
        assert rc == 0
        # source already sits at the target path, so it is left alone
        assert (materials / "props" / "crate.png").exists()

    def test_convert_textures_to_output(self, materials, tmp_path):
        Image.new("RGBA", (2, 2), (1, 2, 3, 255)).save(materials / "props" / "crate.png")
        out = tmp_path / "out"
        run(Config(convert_textures=True, output_dir=out), materials / "props" / "crate.vmt", logger=lambda m: None)
        assert (out / "crate.vmat").exists()
        assert (out / "materials" / "props" / "crate.tga").exists()


class TestMain:
    def test_single_file(self, materials, capsys):
        rc = main([str(materials / "props" / "crate.vmt"), "--version", "sbox", "--texture-extension", "png"])
        assert rc == 0
        text = (materials / "props" / "crate.vmat").read_text(encoding="utf-8")
        assert 'shader "shaders/complex.shader"' in text
        assert "materials/props/crate.png" in text
        assert "[DONE]" in capsys.readouterr().out

    def test_config_file_with_overrides(self, tmp_path):
        cfg_path = tmp_path / "cfg.json"
        cfg_path.write_text(json.dumps({"version": "cs2", "keep_unknown": True}), encoding="utf-8")
        args = build_parser().parse_args(["in.vmt", "--config", str(cfg_path), "--texture-extension", "jpeg"])
        cfg = config_from_args(args, logger=lambda m: None)
        assert cfg.version is Source2Version.CS2
        assert cfg.texture_extension == "jpg"
        assert cfg.keep_unknown

    def test_unreadable_config(self, tmp_path):
        args = build_parser().parse_args(["in.vmt", "--config", str(tmp_path / "missing.json")])
        with pytest.raises(SystemExit):
            config_from_args(args, logger=lambda m: None)


def test_guess_content_root(materials):
    assert guess_content_root(materials / "props" / "crate.vmt") == materials.parent.resolve()
