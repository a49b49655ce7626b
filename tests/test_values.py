"""Tests for token normalisation and the value encoder."""

import pytest

from vmt2vmat.rules import ValueShape
from vmt2vmat.values import encode_value, normalize_token, texture_path, tokenize


class TestNormalisation:
    def test_quotes_slashes_case(self):
        assert normalize_token('"Models\\Props\\Crate01"') == "models/props/crate01"

    def test_tokenize_collapses_whitespace(self):
        assert tokenize('\t"$basetexture"\t\t"Foo/Bar"  ') == ["$basetexture", "foo/bar"]

    def test_tokenize_drops_empty_quotes(self):
        assert tokenize('$envmap ""') == ["$envmap"]


class TestEncodeValue:
    def test_texture(self):
        assert encode_value(ValueShape.TEXTURE, ["foo"], "tga") == "materials/foo.tga"

    def test_texture_drops_vtf_extension(self):
        assert texture_path("brick/wall.vtf", "png") == "materials/brick/wall.png"

    @pytest.mark.parametrize("token", ["brick/wall.tga", "brick/wall.png", "brick/wall.jpeg"])
    def test_texture_drops_image_extension(self, token):
        assert texture_path(token, "tga") == "materials/brick/wall.tga"

    def test_texture_keeps_unrelated_dots(self):
        assert texture_path("brick/wall.v2", "tga") == "materials/brick/wall.v2.tga"

    @pytest.mark.parametrize("shape", [ValueShape.TEXT, ValueShape.NUMBER])
    def test_scalar_verbatim(self, shape):
        assert encode_value(shape, ["0.5", "extra"], "tga") == "0.5"

    def test_vector2(self):
        assert encode_value(ValueShape.VECTOR2, ["1", "2"], "tga") == "[1 2]"

    def test_same_value_vector2(self):
        assert encode_value(ValueShape.SAME_VALUE_V2, ["4"], "tga") == "[4 4]"

    def test_vector3_strips_brackets(self):
        assert encode_value(ValueShape.VECTOR3, ["[1", "0.5", "0.25]"], "tga") == "[1 0.5 0.25]"

    def test_vector3_curly_braces(self):
        assert encode_value(ValueShape.VECTOR3, ["{255", "128", "0}"], "tga") == "[255 128 0]"

    @pytest.mark.parametrize(
        "shape, tokens",
        [
            (ValueShape.TEXTURE, []),
            (ValueShape.NUMBER, []),
            (ValueShape.VECTOR2, ["1"]),
            (ValueShape.VECTOR3, ["1", "2"]),
        ],
    )
    def test_too_few_tokens(self, shape, tokens):
        assert encode_value(shape, tokens, "tga") is None
