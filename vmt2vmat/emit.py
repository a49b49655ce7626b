"""Render a variable store as VMAT text."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from .rules import (
    Source2Version,
    translate_cubemap_mode,
    translate_detail_mode,
    translate_surface_property,
)
from .variables import Category, Group, Variable

ROOT_BLOCK = "Layer0"
PHYSICS_BLOCK = "SystemAttributes"
SHADER_FAULT_MARKER = "// FAULT! SHADER FAILED TO TRANSLATE"


def group_variables(variables: Iterable[Variable]) -> List[Tuple[Group, List[Variable]]]:
    """Bucket variables by group, keeping insertion order inside each bucket."""
    grouped: Dict[Group, List[Variable]] = {}
    for var in variables:
        grouped.setdefault(var.group, []).append(var)
    return sorted(grouped.items(), key=lambda item: item[0].value)


def _header(source_name: Optional[str]) -> List[str]:
    lines = ["// THIS FILE WAS AUTOMATICALLY TRANSLATED FROM VMT BY VMT2VMAT"]
    if source_name:
        lines.append(f"// Source: {source_name}")
    lines.append("")
    return lines


def format_line(key: str, value: str, comment: str, indent: str = "\t") -> str:
    parts = [key] if key else []
    if value:
        parts.append(f'"{value}"')
    if comment:
        parts.append(f"// {comment}")
    return indent + " ".join(parts)


def render_variable(var: Variable, version: Source2Version) -> List[str]:
    if var.category is Category.SURFACE_PROPERTY:
        return [
            f"\t{PHYSICS_BLOCK}",
            "\t{",
            format_line(var.key, translate_surface_property(var.value, version), var.comment, indent="\t\t"),
            "\t}",
        ]
    if var.category is Category.CUBEMAP:
        return [format_line(var.key, translate_cubemap_mode(var.value), var.comment)]
    if var.category is Category.DETAIL:
        return [format_line(var.key, translate_detail_mode(var.value), var.comment)]
    return [format_line(var.key, var.value, var.comment)]


def render_vmat(
    variables: Iterable[Variable],
    version: Source2Version,
    source_name: Optional[str] = None,
) -> str:
    lines = _header(source_name)
    lines.append(ROOT_BLOCK)
    lines.append("{")
    groups = group_variables(variables)
    for idx, (group, members) in enumerate(groups):
        if idx:
            lines.append("")
        lines.append(f"\t//---- {group.label} ----")
        for var in members:
            lines.extend(render_variable(var, version))
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_failure(source_name: Optional[str] = None) -> str:
    """The partial output written when the shader line cannot be translated."""
    lines = _header(source_name)
    lines.extend([ROOT_BLOCK, "{", SHADER_FAULT_MARKER, "}"])
    return "\n".join(lines) + "\n"
