"""Post-pass inference over a finished variable store.

After every VMT line has been translated, a fixed sequence of rules looks at
what was collected and fills in the VMAT features Source 2 needs but the VMT
never stated (translucency textures, specular, self-illum masks, overlay
shaders).  ``INFERENCE_RULES`` is evaluated top to bottom and each predicate
sees the store as left by the rules before it, so the order of that list is
part of the behaviour.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Callable, List, Optional

from .rules import INVALID_SENTINEL, Source2Version, overlay_shader
from .variables import Category, Group, LogFn, Variable, VariableStore

ALPHA_TEXTURE_SUFFIX = "_trans"
SELF_ILLUM_TEXTURE_SUFFIX = "_selfillum"

BLEND_MODE_KEY = "F_BLEND_MODE"
TRANSLUCENT_BLEND = "1"


def suffixed_texture(path: str, suffix: str) -> str:
    """``materials/foo.tga`` + ``_trans`` -> ``materials/foo_trans.tga``."""
    stem, ext = posixpath.splitext(path)
    return f"{stem}{suffix}{ext}"


class InferenceContext:
    def __init__(self, store: VariableStore, version: Source2Version, logger: Optional[LogFn] = None):
        self.store = store
        self.version = version
        self.logger = logger

    def log(self, message: str) -> None:
        if self.logger:
            self.logger(message)

    def derive_from_color(self, suffix: str) -> Variable:
        """Build a texture variable named after the colour map.

        Falls back to the ``Invalid`` sentinel when there is no colour map.
        """
        color = self.store.get(Category.COLOR_TEXTURE)
        if color is None:
            self.log(f"[WARN] No colour texture to derive '{suffix}' from; using '{INVALID_SENTINEL}'.")
            return Variable(key="", value=INVALID_SENTINEL)
        return Variable(key="", value=suffixed_texture(color.value, suffix), derived_from=color.value)


InferencePredicate = Callable[[VariableStore], bool]
InferenceAction = Callable[[InferenceContext], None]


@dataclass(frozen=True)
class InferenceRule:
    name: str
    predicate: InferencePredicate
    action: InferenceAction


def _overlay_alpha(ctx: InferenceContext):
    # overlays always blend, whatever alpha mode the VMT asked for
    while ctx.store.has(Category.ALPHA):
        ctx.store.remove(Category.ALPHA)
    ctx.store.add(
        Variable(
            key=BLEND_MODE_KEY,
            value=TRANSLUCENT_BLEND,
            comment="Overlay materials are translucent",
            category=Category.ALPHA,
            group=Group.ALPHA,
        )
    )


def _alpha_texture_from_color(ctx: InferenceContext):
    derived = ctx.derive_from_color(ALPHA_TEXTURE_SUFFIX)
    derived.key = "TextureTranslucency"
    derived.comment = "Translucency from the colour texture's alpha"
    derived.category = Category.ALPHA_TEXTURE
    derived.group = Group.ALPHA
    ctx.store.add(derived)


def _specular_from_maps(ctx: InferenceContext):
    ctx.store.add(
        Variable(
            key="F_SPECULAR",
            value="1",
            comment="Normal or roughness map present",
            category=Category.SPECULAR,
            group=Group.ROUGHNESS,
        )
    )


def _self_illum_reconcile(ctx: InferenceContext):
    if ctx.store.has(Category.SELF_ILLUM_TEXTURE):
        ctx.store.add(
            Variable(
                key="F_SELF_ILLUM",
                value="1",
                comment="Self-illum mask present",
                category=Category.SELF_ILLUM,
                group=Group.SELF_ILLUM,
            )
        )
        return
    derived = ctx.derive_from_color(SELF_ILLUM_TEXTURE_SUFFIX)
    derived.key = "TextureSelfIllumMask"
    derived.comment = "Self-illum mask from the colour texture's alpha"
    derived.category = Category.SELF_ILLUM_TEXTURE
    derived.group = Group.SELF_ILLUM
    ctx.store.add(derived)


def _overlay_shader_override(ctx: InferenceContext):
    shader = ctx.store.get(Category.SHADER)
    shader.value = overlay_shader(ctx.version)


INFERENCE_RULES: List[InferenceRule] = [
    InferenceRule(
        "overlay_alpha",
        lambda store: store.has(Category.OVERLAY),
        _overlay_alpha,
    ),
    InferenceRule(
        "alpha_texture_from_color",
        lambda store: store.has(Category.ALPHA) and not store.has(Category.ALPHA_TEXTURE),
        _alpha_texture_from_color,
    ),
    InferenceRule(
        "specular_from_maps",
        lambda store: (store.has(Category.NORMAL_TEXTURE) or store.has(Category.ROUGHNESS_TEXTURE))
        and not store.has(Category.SPECULAR),
        _specular_from_maps,
    ),
    InferenceRule(
        "self_illum_reconcile",
        lambda store: store.has(Category.SELF_ILLUM_TEXTURE) != store.has(Category.SELF_ILLUM),
        _self_illum_reconcile,
    ),
    InferenceRule(
        "overlay_shader_override",
        lambda store: store.has(Category.SHADER) and store.has(Category.OVERLAY),
        _overlay_shader_override,
    ),
]


def run_inference(
    store: VariableStore,
    version: Source2Version,
    logger: Optional[LogFn] = None,
    rules: Optional[List[InferenceRule]] = None,
) -> List[str]:
    """Apply the inference rules in order; return the names of those that fired."""
    ctx = InferenceContext(store, version, logger)
    fired: List[str] = []
    for rule in rules if rules is not None else INFERENCE_RULES:
        if not rule.predicate(store):
            continue
        rule.action(ctx)
        fired.append(rule.name)
    return fired
