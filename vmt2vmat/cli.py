"""Command line entry point: translate one VMT or a whole directory tree."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .config import Config, parse_texture_extension, parse_version
from .textures import AssetIndex, TextureConverter, collect_texture_jobs
from .translator import TranslationResult, translate_lines

FAILURE_LOG = "translation_failures.txt"


def read_vmt_lines(path: Path) -> List[str]:
    return path.read_text(encoding="utf-8", errors="ignore").splitlines()


def iter_vmt_files(root: Path) -> Iterable[Path]:
    if root.is_file():
        yield root
        return
    for p in sorted(root.rglob("*")):
        if p.is_file() and p.suffix.lower() == ".vmt":
            yield p


def output_path_for(vmt_path: Path, input_root: Path, output_dir: Optional[Path]) -> Path:
    if output_dir is None:
        return vmt_path.with_suffix(".vmat")
    if input_root.is_file():
        return output_dir / vmt_path.with_suffix(".vmat").name
    return output_dir / vmt_path.relative_to(input_root).with_suffix(".vmat")


def guess_content_root(vmt_path: Path) -> Path:
    """The directory holding ``materials/``, or the VMT's own folder."""
    for parent in vmt_path.resolve().parents:
        if parent.name.lower() == "materials":
            return parent.parent
    return vmt_path.resolve().parent


class BatchTranslator:
    def __init__(self, cfg: Config, logger=print):
        self.cfg = cfg
        self.logger = logger
        self._indexes: Dict[Path, AssetIndex] = {}
        self.failures: List[Path] = []
        self.written = 0
        self.textures_converted = 0
        self.texture_failures = 0

    def _index_for(self, content_root: Path) -> AssetIndex:
        index = self._indexes.get(content_root)
        if index is None:
            index = AssetIndex(content_root)
            index.build()
            self.logger(f"[INFO] Indexed {len(index)} source textures under {content_root}")
            self._indexes[content_root] = index
        return index

    def translate(self, vmt_path: Path) -> TranslationResult:
        return translate_lines(
            read_vmt_lines(vmt_path),
            self.cfg.version,
            self.cfg.texture_extension,
            keep_unknown=self.cfg.keep_unknown,
            verbose=self.cfg.verbose,
            logger=self.logger,
        )

    def convert_textures(self, vmt_path: Path, result: TranslationResult) -> None:
        content_root = self.cfg.content_root or guess_content_root(vmt_path)
        output_root = self.cfg.output_dir or content_root
        converter = TextureConverter(self.cfg, self._index_for(content_root), output_root, logger=self.logger)
        converted, failures = converter.convert_all(collect_texture_jobs(result.store))
        self.textures_converted += converted
        self.texture_failures += len(failures)

    def process_file(self, vmt_path: Path, out_path: Path) -> bool:
        if out_path.exists() and not self.cfg.overwrite:
            if self.cfg.verbose:
                self.logger(f"[SKIP] {out_path} exists.")
            return True

        result = self.translate(vmt_path)
        if not result.ok:
            self.logger(f"[FAIL] {vmt_path}: {result.error}")
            self.failures.append(vmt_path)
        else:
            self.logger(f"[OK] {vmt_path} -> {out_path}")

        if result.ok and self.cfg.convert_textures:
            self.convert_textures(vmt_path, result)
        if self.cfg.dry_run:
            return result.ok

        # a failed shader still leaves the marked partial output behind
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(result.render(vmt_path.name), encoding="utf-8")
        self.written += 1
        return result.ok

    def write_failure_log(self, root: Path) -> Optional[Path]:
        if not self.failures or self.cfg.dry_run:
            return None
        log_path = root / FAILURE_LOG
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(log_path, "w", encoding="utf-8") as f:
            f.write(f"# {len(self.failures)} materials failed to translate:\n\n")
            for path in self.failures:
                f.write(f"{path}\n")
        return log_path


def run(cfg: Config, input_path: Path, logger=print) -> int:
    if not input_path.exists():
        raise SystemExit(f"Input not found: {input_path}")
    if input_path.is_file() and input_path.suffix.lower() != ".vmt":
        raise SystemExit(f"Not a .vmt file: {input_path}")

    logger(f"[INFO] Target: {cfg.version.value}, textures as .{cfg.texture_extension}")
    batch = BatchTranslator(cfg, logger=logger)
    files = list(iter_vmt_files(input_path))
    if not files:
        logger(f"[INFO] No .vmt files found under {input_path}")
        return 0

    for vmt_path in files:
        batch.process_file(vmt_path, output_path_for(vmt_path, input_path, cfg.output_dir))

    log_root = cfg.output_dir or (input_path if input_path.is_dir() else input_path.parent)
    failure_log = batch.write_failure_log(log_root)
    if failure_log:
        logger(f"[WARN] {len(batch.failures)} materials failed to translate. See {failure_log}")
    if cfg.convert_textures:
        logger(f"[INFO] Converted {batch.textures_converted} textures ({batch.texture_failures} failed).")
    if cfg.dry_run:
        logger("[INFO] Dry run complete. No files were written.")
    logger(f"[DONE] Translated {len(files) - len(batch.failures)}/{len(files)} materials.")
    return 1 if batch.failures else 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="vmt2vmat", description="Translate Source 1 VMT materials to Source 2 VMAT")
    ap.add_argument("input", help="A .vmt file or a directory searched recursively for .vmt files")
    ap.add_argument("-o", "--output", help="Output directory (default: next to each .vmt)")
    ap.add_argument("--config", help="Path to a JSON config file")
    ap.add_argument("--version", dest="target_version", help="Target title: hla, cs2 or sbox (default hla)")
    ap.add_argument("--texture-extension", help="Texture file type: tga, png or jpg (default tga)")
    ap.add_argument("--convert-textures", action="store_true", help="Convert referenced textures with Pillow")
    ap.add_argument("--content-root", help="Directory containing materials/ (default: guessed per file)")
    ap.add_argument("--converter-exe", help="External VTF exporter (VTFCmd) used for .vtf sources")
    ap.add_argument("--keep-unknown", action="store_true", help="Keep unknown VMT keys as comments")
    ap.add_argument("--no-overwrite", action="store_true", help="Skip materials whose .vmat already exists")
    ap.add_argument("--dry-run", action="store_true", help="Translate without writing anything")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def config_from_args(args: argparse.Namespace, logger=print) -> Config:
    if args.config:
        try:
            cfg = Config.from_json(args.config, logger=logger)
        except (OSError, ValueError) as exc:
            raise SystemExit(f"Could not read config {args.config}: {exc}")
    else:
        cfg = Config()

    overrides = {}
    if args.target_version:
        overrides["version"] = parse_version(args.target_version, logger)
    if args.texture_extension:
        overrides["texture_extension"] = parse_texture_extension(args.texture_extension, logger)
    if args.output:
        overrides["output_dir"] = Path(args.output)
    if args.content_root:
        overrides["content_root"] = Path(args.content_root)
    if args.converter_exe:
        overrides["converter_exe"] = Path(args.converter_exe)
    for flag in ("convert_textures", "keep_unknown", "dry_run", "verbose"):
        if getattr(args, flag):
            overrides[flag] = True
    if args.no_overwrite:
        overrides["overwrite"] = False
    return replace(cfg, **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = config_from_args(args)
    return run(cfg, Path(args.input))


if __name__ == "__main__":
    sys.exit(main())
