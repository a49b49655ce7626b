"""Line-by-line VMT -> VMAT translation.

``translate_lines`` is the whole engine for one file: the first content line
must name a shader, every following line is looked up in the keyword table,
encoded and appended to a fresh :class:`VariableStore`, and finally the
inference rules run over the result.  Nothing is raised for bad input; the
returned :class:`TranslationResult` says whether the file translated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .emit import render_failure, render_vmat
from .inference import run_inference
from .rules import (
    ARMS_DETAIL_MODE,
    ARMS_SURFACE_PROPERTY,
    BLOCK_DELIMITERS,
    Source2Version,
    ValueShape,
    lookup_keyword,
    lookup_shader,
)
from .values import encode_value, tokenize
from .variables import Category, Group, LogFn, Variable, VariableStore

DEFAULT_TEXTURE_EXTENSION = "tga"


@dataclass
class TranslationContext:
    """State carried from one line to the next within a single file."""

    version: Source2Version = Source2Version.HLA
    texture_extension: str = DEFAULT_TEXTURE_EXTENSION
    keep_unknown: bool = False
    verbose: bool = False
    logger: Optional[LogFn] = None
    has_shader: bool = False
    # $surfaceprop arms this; the next text/number value becomes the physics block
    surface_property_armed: bool = False
    has_surface_property: bool = False
    # $detailblendmode arms this; the next number value is remapped as a detail mode
    detail_armed: bool = False
    has_detail: bool = False

    def log(self, message: str) -> None:
        if self.logger:
            self.logger(message)

    def debug(self, message: str) -> None:
        if self.verbose:
            self.log(message)


@dataclass
class TranslationResult:
    ok: bool
    store: VariableStore
    version: Source2Version
    error: str = ""
    fired_rules: List[str] = field(default_factory=list)

    def render(self, source_name: Optional[str] = None) -> str:
        if not self.ok:
            return render_failure(source_name)
        return render_vmat(self.store, self.version, source_name)


def is_skippable(line: str) -> bool:
    return not line or line in BLOCK_DELIMITERS or line.startswith("//")


def translate_shader_line(ctx: TranslationContext, line: str) -> Optional[Variable]:
    tokens = line.split()
    name = tokens[0] if tokens else ""
    shader = lookup_shader(name, ctx.version)
    if shader is None:
        return None
    ctx.has_shader = True
    return Variable(
        key="shader",
        value=shader,
        comment=line,
        source_text=name.strip("\"'").lower(),
        category=Category.SHADER,
        group=Group.SHADER,
    )


def translate_keyword_line(ctx: TranslationContext, line: str) -> Optional[Variable]:
    tokens = tokenize(line)
    if not tokens:
        return None
    source_text = " ".join(tokens)

    rule = lookup_keyword(tokens[0])
    if rule is None:
        ctx.debug(f"[SKIP] Unknown keyword: {tokens[0]}")
        if ctx.keep_unknown:
            return Variable(key="", comment=line, source_text=source_text)
        return None

    value = encode_value(rule.shape, tokens[1:], ctx.texture_extension)
    if value is None:
        ctx.log(f"[WARN] Not enough values for {tokens[0]} ({rule.shape.value}); skipping '{line}'.")
        return None

    # only a line that encoded can arm a lookahead flag
    if rule.arms == ARMS_SURFACE_PROPERTY:
        ctx.surface_property_armed = True
    elif rule.arms == ARMS_DETAIL_MODE:
        ctx.detail_armed = True

    category, group = rule.category, rule.group
    if rule.shape == ValueShape.NUMBER and ctx.detail_armed and not ctx.has_detail:
        category = Category.DETAIL
        ctx.detail_armed = False
        ctx.has_detail = True
    elif rule.shape in (ValueShape.TEXT, ValueShape.NUMBER):
        if ctx.surface_property_armed and not ctx.has_surface_property:
            category, group = Category.SURFACE_PROPERTY, Group.PHYSICS
            ctx.surface_property_armed = False
            ctx.has_surface_property = True

    var = Variable(
        key=rule.target_key,
        value=value,
        comment=line,
        source_text=source_text,
        category=category,
        group=group,
    )
    ctx.debug(f'[OK] Translated "{source_text}" -> {var.key} "{var.value}"')
    return var


def translate_lines(
    lines: Iterable[str],
    version: Source2Version = Source2Version.HLA,
    texture_extension: str = DEFAULT_TEXTURE_EXTENSION,
    *,
    keep_unknown: bool = False,
    verbose: bool = False,
    logger: Optional[LogFn] = None,
    infer: bool = True,
) -> TranslationResult:
    ctx = TranslationContext(
        version=version,
        texture_extension=texture_extension,
        keep_unknown=keep_unknown,
        verbose=verbose,
        logger=logger,
    )
    store = VariableStore(logger=logger)

    for raw in lines:
        line = raw.strip()
        if is_skippable(line):
            continue

        if not ctx.has_shader:
            shader = translate_shader_line(ctx, line)
            if shader is None:
                ctx.log(f"[FAIL] Shader failed to translate: '{line}'")
                return TranslationResult(
                    ok=False,
                    store=VariableStore(logger=logger),
                    version=version,
                    error=f"unsupported shader '{line}'",
                )
            store.add(shader)
            ctx.debug(f'[OK] Translated shader "{shader.source_text}" -> "{shader.value}"')
            continue

        var = translate_keyword_line(ctx, line)
        if var is not None:
            store.add(var)

    if not ctx.has_shader:
        ctx.log("[FAIL] No shader line found.")
        return TranslationResult(ok=False, store=store, version=version, error="no shader line")

    fired = run_inference(store, version, logger=logger) if infer else []
    for name in fired:
        ctx.debug(f"[INFO] Inference rule applied: {name}")
    return TranslationResult(ok=True, store=store, version=version, fired_rules=fired)
