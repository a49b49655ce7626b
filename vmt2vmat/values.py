"""Token normalisation and VMAT value encoding."""

from __future__ import annotations

import posixpath
from typing import List, Optional, Sequence

from .rules import ValueShape

TEXTURE_ROOT = "materials"

# file types a texture reference may carry; .vtf last so Pillow-readable images win
SOURCE_TEXTURE_EXTS = (".tga", ".png", ".jpg", ".jpeg", ".bmp", ".tif", ".vtf")

_REQUIRED_TOKENS = {
    ValueShape.TEXTURE: 1,
    ValueShape.TEXT: 1,
    ValueShape.NUMBER: 1,
    ValueShape.VECTOR2: 2,
    ValueShape.SAME_VALUE_V2: 1,
    ValueShape.VECTOR3: 3,
}

_VECTOR_SHAPES = (ValueShape.VECTOR2, ValueShape.SAME_VALUE_V2, ValueShape.VECTOR3)


def normalize_token(token: str) -> str:
    # quotes are re-added on emission
    return token.replace('"', "").replace("\\", "/").lower()


def tokenize(line: str) -> List[str]:
    return [t for t in (normalize_token(tok) for tok in line.split()) if t]


def _component(token: str) -> str:
    # some VMT vectors use {} instead of []
    return token.strip("[]{} ")


def texture_path(token: str, extension: str) -> str:
    token = token.lstrip("/")
    stem, ext = posixpath.splitext(token)
    if ext in SOURCE_TEXTURE_EXTS:
        token = stem
    return f"{TEXTURE_ROOT}/{token}.{extension}"


def encode_value(shape: ValueShape, tokens: Sequence[str], texture_extension: str) -> Optional[str]:
    """Render the tokens following a key as a VMAT value.

    Returns ``None`` when the line carries fewer tokens than ``shape`` needs.
    """

    if shape in _VECTOR_SHAPES:
        vals = [_component(tok) for tok in tokens]
    else:
        vals = list(tokens)
    vals = [v for v in vals if v]
    if len(vals) < _REQUIRED_TOKENS[shape]:
        return None

    if shape is ValueShape.TEXTURE:
        return texture_path(vals[0], texture_extension)
    if shape in (ValueShape.TEXT, ValueShape.NUMBER):
        return vals[0]
    if shape is ValueShape.VECTOR2:
        return f"[{vals[0]} {vals[1]}]"
    if shape is ValueShape.SAME_VALUE_V2:
        return f"[{vals[0]} {vals[0]}]"
    if shape is ValueShape.VECTOR3:
        return f"[{vals[0]} {vals[1]} {vals[2]}]"
    raise ValueError(f"Unhandled value shape: {shape}")
