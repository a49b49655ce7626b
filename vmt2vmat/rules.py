"""Static translation tables for VMT -> VMAT conversion.

Everything in here is pure data plus thin lookup helpers: keyword rules,
shader rules per Source 2 title, and the small sub-translators (surface
properties, cubemap modes, detail blend modes) used at emission time.  The
sub-translators are total: an unknown input maps to a visible sentinel string
instead of failing the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .variables import Category, Group

UNKNOWN_SENTINEL = "Unknown"
INVALID_SENTINEL = "Invalid"

BLOCK_DELIMITERS = ("{", "}")


class Source2Version(Enum):
    """Source 2 titles we can target; each has its own shader vocabulary."""

    HLA = "hla"  # Half-Life: Alyx
    CS2 = "cs2"  # Counter-Strike 2
    SBOX = "sbox"  # s&box


class ValueShape(Enum):
    TEXTURE = "texture"
    TEXT = "text"
    NUMBER = "number"
    VECTOR2 = "vector2"
    SAME_VALUE_V2 = "same_value_v2"
    VECTOR3 = "vector3"


# Run-scoped flags a keyword can arm (see TranslationContext).
ARMS_SURFACE_PROPERTY = "surface_property"
ARMS_DETAIL_MODE = "detail_mode"


@dataclass(frozen=True)
class KeywordRule:
    target_key: str
    shape: ValueShape
    category: Category
    group: Group
    arms: Optional[str] = None


# ---------------------------------------------------------------------------
# Keyword rules
# ---------------------------------------------------------------------------


KEYWORD_RULES: Dict[str, KeywordRule] = {
    "$basetexture": KeywordRule("TextureColor", ValueShape.TEXTURE, Category.COLOR_TEXTURE, Group.COLOR),
    "$color": KeywordRule("g_vColorTint", ValueShape.VECTOR3, Category.VECTOR3, Group.COLOR),
    "$bumpmap": KeywordRule("TextureNormal", ValueShape.TEXTURE, Category.NORMAL_TEXTURE, Group.NORMAL),
    "$normalmap": KeywordRule("TextureNormal", ValueShape.TEXTURE, Category.NORMAL_TEXTURE, Group.NORMAL),
    "$phongexponenttexture": KeywordRule(
        "TextureRoughness", ValueShape.TEXTURE, Category.ROUGHNESS_TEXTURE, Group.ROUGHNESS
    ),
    "$phongexponent": KeywordRule("g_flRoughnessScaleFactor", ValueShape.NUMBER, Category.NUMBER, Group.ROUGHNESS),
    "$ambientocclusiontexture": KeywordRule(
        "TextureAmbientOcclusion", ValueShape.TEXTURE, Category.AO_TEXTURE, Group.AMBIENT_OCCLUSION
    ),
    "$ambientoccltexture": KeywordRule(
        "TextureAmbientOcclusion", ValueShape.TEXTURE, Category.AO_TEXTURE, Group.AMBIENT_OCCLUSION
    ),
    "$surfaceprop": KeywordRule(
        "PhysicsSurfaceProperties", ValueShape.TEXT, Category.UNKNOWN, Group.PHYSICS, arms=ARMS_SURFACE_PROPERTY
    ),
    "$translucent": KeywordRule("F_TRANSLUCENT", ValueShape.NUMBER, Category.ALPHA, Group.ALPHA),
    "$alphatest": KeywordRule("F_ALPHA_TEST", ValueShape.NUMBER, Category.ALPHA, Group.ALPHA),
    "$detail": KeywordRule("TextureDetail", ValueShape.TEXTURE, Category.DETAIL_TEXTURE, Group.DETAIL),
    "$detailscale": KeywordRule("g_vDetailTexCoordScale", ValueShape.SAME_VALUE_V2, Category.VECTOR2, Group.DETAIL),
    "$detailblendfactor": KeywordRule("g_flDetailBlendFactor", ValueShape.NUMBER, Category.NUMBER, Group.DETAIL),
    "$detailblendmode": KeywordRule(
        "F_DETAIL_TEXTURE", ValueShape.NUMBER, Category.NUMBER, Group.DETAIL, arms=ARMS_DETAIL_MODE
    ),
    "$envmap": KeywordRule("F_SPECULAR_CUBE_MAP", ValueShape.TEXT, Category.CUBEMAP, Group.ROUGHNESS),
    "$nocull": KeywordRule("F_RENDER_BACKFACES", ValueShape.NUMBER, Category.NUMBER, Group.UNKNOWN),
    "$selfillum": KeywordRule("F_SELF_ILLUM", ValueShape.NUMBER, Category.SELF_ILLUM, Group.SELF_ILLUM),
    "$selfillummask": KeywordRule(
        "TextureSelfIllumMask", ValueShape.TEXTURE, Category.SELF_ILLUM_TEXTURE, Group.SELF_ILLUM
    ),
    "$decal": KeywordRule("F_OVERLAY", ValueShape.NUMBER, Category.OVERLAY, Group.UNKNOWN),
}


def lookup_keyword(source_key: str) -> Optional[KeywordRule]:
    """Return the rule for a normalised VMT key, or ``None`` to skip the line."""
    if not source_key or source_key in BLOCK_DELIMITERS:
        return None
    return KEYWORD_RULES.get(source_key)


# ---------------------------------------------------------------------------
# Shader rules
# ---------------------------------------------------------------------------


_COMPLEX = {
    Source2Version.HLA: "vr_complex.vfx",
    Source2Version.CS2: "complex.vfx",
    Source2Version.SBOX: "shaders/complex.shader",
}

# Only HL:A ships a dedicated two-way blend; the other titles reuse its name.
_TWO_WAY_BLEND = {
    Source2Version.HLA: "vr_simple_2way_blend.vfx",
}

SHADER_RULES: Dict[str, Dict[Source2Version, str]] = {
    "vertexlitgeneric": _COMPLEX,
    "lightmappedgeneric": _COMPLEX,
    "worldvertextransition": _TWO_WAY_BLEND,
}

OVERLAY_SHADERS: Dict[Source2Version, str] = {
    Source2Version.HLA: "vr_projected_decals.vfx",
    Source2Version.CS2: "csgo_static_overlay.vfx",
    Source2Version.SBOX: "shaders/decal.shader",
}


def lookup_shader(source_shader: str, version: Source2Version) -> Optional[str]:
    name = source_shader.strip().strip("\"'").lower()
    if not name:
        return None
    by_version = SHADER_RULES.get(name)
    if by_version is None:
        return None
    return by_version.get(version, by_version[Source2Version.HLA])


def overlay_shader(version: Source2Version) -> str:
    return OVERLAY_SHADERS[version]


# ---------------------------------------------------------------------------
# Emission-time sub-translators
# ---------------------------------------------------------------------------


# source name -> (HLA, CS2, s&box)
SURFACE_PROPERTIES: Dict[str, Tuple[str, str, str]] = {
    "metal": ("prop.metal", "metal", "metal"),
    "metalpanel": ("world.metal_panel", "metal_panel", "metal.sheet"),
    "concrete": ("world.concrete", "concrete", "concrete"),
    "wood": ("prop.wood", "wood", "wood"),
    "glass": ("prop.glass", "glass", "glass"),
    "dirt": ("world.dirt", "dirt", "dirt"),
    "grass": ("world.grass", "grass", "grass"),
    "tile": ("world.tile", "tile", "tile"),
    "flesh": ("prop.flesh", "flesh", "flesh"),
    "plastic": ("prop.plastic", "plastic", "plastic"),
}

_VERSION_COLUMN = {
    Source2Version.HLA: 0,
    Source2Version.CS2: 1,
    Source2Version.SBOX: 2,
}

CUBEMAP_MODES: Dict[str, str] = {
    "env_cubemap": "1",  # in-game cubemap
}

# VMT $detailblendmode -> VMAT F_DETAIL_TEXTURE
DETAIL_MODES: Dict[str, str] = {
    "0": "3",  # DecalModulate
    "1": "2",  # Additive -> overlay
}


def translate_surface_property(value: str, version: Source2Version) -> str:
    names = SURFACE_PROPERTIES.get(value.lower())
    if names is None:
        return UNKNOWN_SENTINEL
    return names[_VERSION_COLUMN[version]]


def translate_cubemap_mode(value: str) -> str:
    return CUBEMAP_MODES.get(value.lower(), INVALID_SENTINEL)


def translate_detail_mode(value: str) -> str:
    return DETAIL_MODES.get(value, INVALID_SENTINEL)
