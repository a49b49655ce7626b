"""Texture conversion for translated materials.

A translated VMAT points at ``materials/<name>.<ext>`` files that usually do
not exist yet: the VMT referenced ``.vtf`` textures (or images in some other
format), and the inference pass may have asked for ``_trans`` / ``_selfillum``
masks that have to be cut out of the colour map's alpha channel.  This module
turns the texture variables of a store into jobs, finds their sources under a
content root and writes the outputs with Pillow.  ``.vtf`` sources go through
an external exporter first (VTFCmd's ``-file/-output/-exportformat`` CLI).
"""

from __future__ import annotations

import posixpath
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from PIL import Image

from .config import Config
from .rules import INVALID_SENTINEL
from .values import SOURCE_TEXTURE_EXTS, TEXTURE_ROOT
from .variables import TEXTURE_CATEGORIES, LogFn, Variable

SOURCE_EXTS = list(SOURCE_TEXTURE_EXTS)
VTF_EXPORT_FORMAT = "tga"

_PIL_FORMATS = {
    ".tga": "TGA",
    ".png": "PNG",
    ".jpg": "JPEG",
}


@dataclass(frozen=True)
class TextureJob:
    target: str
    source: str
    channel: Optional[str] = None


def collect_texture_jobs(variables: Iterable[Variable]) -> List[TextureJob]:
    """Every texture a translated material references, once each."""
    jobs: Dict[str, TextureJob] = {}
    for var in variables:
        if var.category not in TEXTURE_CATEGORIES:
            continue
        if not var.value or var.value == INVALID_SENTINEL or var.value in jobs:
            continue
        if var.derived_from:
            jobs[var.value] = TextureJob(target=var.value, source=var.derived_from, channel="A")
        else:
            jobs[var.value] = TextureJob(target=var.value, source=var.value)
    return list(jobs.values())


class AssetIndex:
    """Source textures under a content root, keyed by path without extension.

    A key may have several files (``wall.vtf`` next to an exported
    ``wall.tga``); ``resolve`` picks by ``SOURCE_EXTS`` order so an image
    Pillow can open directly is used before the VTF exporter is needed.
    """

    def __init__(self, base_root: Path):
        self.base_root = base_root
        self._map: Dict[str, Dict[str, Path]] = {}

    def build(self):
        root = self.base_root
        for ext in SOURCE_EXTS:
            for p in root.rglob(f"*{ext}"):
                key = p.relative_to(root).with_suffix("").as_posix().lower()
                self._map.setdefault(key, {})[ext] = p

    def __len__(self) -> int:
        return sum(len(found) for found in self._map.values())

    def resolve(self, token: Optional[str]) -> Optional[Path]:
        if not token:
            return None
        key = token.replace("\\", "/").lstrip("/").lower()
        stem, ext = posixpath.splitext(key)
        if ext in SOURCE_EXTS:
            key = stem
        # VMT paths are relative to materials/, translated ones include it
        found = self._map.get(key) or self._map.get(f"{TEXTURE_ROOT}/{key}")
        if not found:
            return None
        for ext in SOURCE_EXTS:
            if ext in found:
                return found[ext]
        return None


def should_rebuild(out_img: Path, deps: List[Path], overwrite: bool) -> bool:
    if not out_img.exists():
        return True
    if overwrite:
        return True
    out_m = out_img.stat().st_mtime
    return any(d.exists() and d.stat().st_mtime > out_m for d in deps)


class TextureConverter:
    def __init__(self, cfg: Config, index: AssetIndex, output_root: Path, logger: Optional[LogFn] = None):
        self.cfg = cfg
        self.index = index
        self.output_root = output_root
        self.logger = logger

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger(message)

    def export_vtf(self, src: Path, out_dir: Path) -> Optional[Path]:
        """Run the external VTF exporter; return the exported image path."""
        exe = self.cfg.converter_exe
        if not exe:
            self._log(f"[WARN] {src.name} is a VTF but no converter_exe is configured.")
            return None
        cmd = [
            str(exe),
            "-file",
            str(src),
            "-output",
            str(out_dir),
            "-exportformat",
            VTF_EXPORT_FORMAT,
        ]
        try:
            proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
        except OSError as exc:
            self._log(f"[WARN] Could not run {exe}: {exc}")
            return None
        exported = out_dir / f"{src.stem}.{VTF_EXPORT_FORMAT}"
        if proc.returncode != 0 or not exported.exists():
            self._log(f"[WARN] VTF export failed for {src} (rc={proc.returncode}): {proc.stdout.strip()}")
            return None
        return exported

    def _save(self, image_path: Path, dst: Path, channel: Optional[str]) -> None:
        with Image.open(image_path) as img:
            if channel:
                out = img.convert("RGBA").getchannel(channel)
            elif dst.suffix.lower() == ".jpg":
                out = img.convert("RGB")
            elif img.mode not in ("RGB", "RGBA", "L"):
                out = img.convert("RGBA")
            else:
                out = img.copy()
        dst.parent.mkdir(parents=True, exist_ok=True)
        out.save(dst, format=_PIL_FORMATS.get(dst.suffix.lower()))

    def convert(self, job: TextureJob) -> bool:
        src = self.index.resolve(job.source)
        if src is None:
            self._log(f"[WARN] No source texture found for '{job.source}'.")
            return False

        dst = self.output_root / job.target
        if job.channel is None and src.resolve() == dst.resolve():
            return True
        if not should_rebuild(dst, [src], self.cfg.overwrite):
            self._log(f"[SKIP] {job.target}: Up-to-date.")
            return True
        if self.cfg.dry_run:
            self._log(f"[TEX] (dry run) {src} -> {dst}")
            return True

        try:
            if src.suffix.lower() == ".vtf":
                with tempfile.TemporaryDirectory() as tmp:
                    exported = self.export_vtf(src, Path(tmp))
                    if exported is None:
                        return False
                    self._save(exported, dst, job.channel)
            else:
                self._save(src, dst, job.channel)
        except (OSError, ValueError) as exc:
            self._log(f"[WARN] Texture conversion failed for {src}: {exc}")
            return False

        self._log(f"[TEX] {src} -> {dst}")
        return True

    def convert_all(self, jobs: Iterable[TextureJob]) -> Tuple[int, List[TextureJob]]:
        converted = 0
        failures: List[TextureJob] = []
        for job in jobs:
            if self.convert(job):
                converted += 1
            else:
                failures.append(job)
        return converted, failures
