"""Translated VMAT variables and the per-file store that holds them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional, Union

LogFn = Callable[[str], None]


class Category(Enum):
    """Semantic role of a variable, independent of where it is written."""

    SHADER = "Shader"
    SURFACE_PROPERTY = "SurfaceProperty"
    SPECULAR = "Specular"
    DETAIL = "Detail"
    CUBEMAP = "Cubemap"
    ALPHA = "Alpha"
    SELF_ILLUM = "SelfIllum"
    OVERLAY = "Overlay"
    COLOR_TEXTURE = "ColorTexture"
    ALPHA_TEXTURE = "AlphaTexture"
    NORMAL_TEXTURE = "NormalTexture"
    ROUGHNESS_TEXTURE = "RoughnessTexture"
    METALNESS_TEXTURE = "MetalnessTexture"
    AO_TEXTURE = "AOTexture"
    CUBEMAP_TEXTURE = "CubemapTexture"
    SELF_ILLUM_TEXTURE = "SelfIllumTexture"
    DETAIL_TEXTURE = "DetailTexture"
    NUMBER = "Number"
    VECTOR2 = "Vector2"
    VECTOR3 = "Vector3"
    VECTOR4 = "Vector4"
    UNKNOWN = "Unknown"


TEXTURE_CATEGORIES = (
    Category.COLOR_TEXTURE,
    Category.ALPHA_TEXTURE,
    Category.NORMAL_TEXTURE,
    Category.ROUGHNESS_TEXTURE,
    Category.METALNESS_TEXTURE,
    Category.AO_TEXTURE,
    Category.CUBEMAP_TEXTURE,
    Category.SELF_ILLUM_TEXTURE,
    Category.DETAIL_TEXTURE,
)


class Group(Enum):
    """Output section of a variable.  Declaration order is emission order."""

    UNKNOWN = 0
    SHADER = 1
    COLOR = 2
    ALPHA = 3
    NORMAL = 4
    ROUGHNESS = 5
    METALNESS = 6
    AMBIENT_OCCLUSION = 7
    DETAIL = 8
    SELF_ILLUM = 9
    PHYSICS = 10

    @property
    def label(self) -> str:
        return _GROUP_LABELS[self]


_GROUP_LABELS = {
    Group.UNKNOWN: "Unknown",
    Group.SHADER: "Shader",
    Group.COLOR: "Color",
    Group.ALPHA: "Alpha",
    Group.NORMAL: "Normal",
    Group.ROUGHNESS: "Roughness",
    Group.METALNESS: "Metalness",
    Group.AMBIENT_OCCLUSION: "AmbientOcclusion",
    Group.DETAIL: "Detail",
    Group.SELF_ILLUM: "SelfIllum",
    Group.PHYSICS: "Physics",
}


@dataclass
class Variable:
    """One VMAT declaration.

    ``comment`` carries the original VMT line and is only ever written back
    out.  ``source_text`` is the normalised ``key value`` text used in log
    lines.  ``derived_from`` is set on texture variables synthesised from
    another texture (e.g. ``_trans`` from the colour map).
    """

    key: str
    value: str = ""
    comment: str = ""
    source_text: str = ""
    category: Category = Category.UNKNOWN
    group: Group = Group.UNKNOWN
    derived_from: str = ""


Selector = Union[Category, str]


def _matches(variable: Variable, selector: Selector) -> bool:
    if isinstance(selector, Category):
        return variable.category is selector
    return variable.key == selector


class VariableStore:
    """Ordered working memory of a single file's translation."""

    def __init__(self, logger: Optional[LogFn] = None):
        self._items: List[Variable] = []
        self._logger = logger

    def _log(self, message: str) -> None:
        if self._logger:
            self._logger(message)

    def __iter__(self) -> Iterator[Variable]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def add(self, variable: Variable) -> bool:
        if variable.category is Category.SHADER and self.has(Category.SHADER):
            self._log(f"[WARN] Refusing second shader '{variable.value}'; one is already set.")
            return False
        self._items.append(variable)
        return True

    def has(self, selector: Selector) -> bool:
        return self.get(selector) is not None

    def get(self, selector: Selector) -> Optional[Variable]:
        for item in self._items:
            if _matches(item, selector):
                return item
        return None

    def find_all(self, selector: Selector) -> List[Variable]:
        return [item for item in self._items if _matches(item, selector)]

    def remove(self, selector: Selector) -> bool:
        for idx, item in enumerate(self._items):
            if _matches(item, selector):
                del self._items[idx]
                return True
        name = selector.value if isinstance(selector, Category) else selector
        self._log(f"[WARN] Nothing to remove for '{name}'.")
        return False
