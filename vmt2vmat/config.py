"""Runtime configuration and the JSON loader behind ``--config``."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from .rules import Source2Version
from .variables import LogFn

DEFAULT_VERSION = Source2Version.HLA
DEFAULT_TEXTURE_EXTENSION = "tga"

TEXTURE_EXTENSIONS = {
    "tga": "tga",
    "png": "png",
    "jpg": "jpg",
    "jpeg": "jpg",
}


def parse_version(value: Optional[str], logger: Optional[LogFn] = None) -> Source2Version:
    if isinstance(value, Source2Version):
        return value
    key = (value or "").strip().lower()
    for version in Source2Version:
        if version.value == key:
            return version
    if key and logger:
        logger(f"[WARN] Unknown version '{value}'; using {DEFAULT_VERSION.value}.")
    return DEFAULT_VERSION


def parse_texture_extension(value: Optional[str], logger: Optional[LogFn] = None) -> str:
    key = (value or "").strip().lstrip(".").lower()
    if key in TEXTURE_EXTENSIONS:
        return TEXTURE_EXTENSIONS[key]
    if key and logger:
        logger(f"[WARN] Unsupported texture extension '{value}'; using {DEFAULT_TEXTURE_EXTENSION}.")
    return DEFAULT_TEXTURE_EXTENSION


@dataclass
class Config:
    version: Source2Version = DEFAULT_VERSION
    texture_extension: str = DEFAULT_TEXTURE_EXTENSION
    output_dir: Optional[Path] = None
    content_root: Optional[Path] = None
    convert_textures: bool = False
    converter_exe: Optional[Path] = None
    overwrite: bool = True
    keep_unknown: bool = False
    verbose: bool = False
    dry_run: bool = False

    @classmethod
    def from_json(cls, path: str | Path, logger: Optional[LogFn] = None) -> "Config":
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: expected a JSON object")
        return cls.from_dict(raw, logger=logger)

    @classmethod
    def from_dict(cls, raw: dict, logger: Optional[LogFn] = None) -> "Config":
        allowed = {f.name for f in fields(cls)}
        top = {k: v for k, v in raw.items() if k in allowed}
        top["version"] = parse_version(top.get("version"), logger)
        top["texture_extension"] = parse_texture_extension(top.get("texture_extension"), logger)
        for key in ("output_dir", "content_root", "converter_exe"):
            if top.get(key):
                top[key] = Path(top[key])
            else:
                top[key] = None
        return cls(**top)
