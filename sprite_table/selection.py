# sprite_table/selection.py
from __future__ import annotations

"""
Compressor selection.

Exports:
- decide_auto_compressor(size_x, size_y, use_trans, bpc) -> str
- benchmark_compressors(prepared, config) -> (best_name, {name: bytes | None})
- resolve_compressor(config, prepared) -> CompressorSpec   (explicit requests)
- effective_compressor(config, prepared) -> CompressorSpec

Notes:
- "auto" is a fixed rule table, a pure function of its four arguments.
- "best" runs the whole pipeline once per compatible candidate into a
  counting sink and keeps the smallest; ties keep the earlier candidate.
- explicit requests are checked and corrected with a warning.
"""

from dataclasses import replace
from typing import Dict, Optional, Tuple

from .compress import CompressorSpec, compatibility_issue, get_compressor
from .constants import BEST_CANDIDATES, CROP_TIERS
from .core_types import ExportConfig, SpriteTableError
from .pipeline import PreparedImage, measure_total_bytes
from .utils import debug_log, log, warn


def _smallest_tier(size_x: int, size_y: int) -> Optional[int]:
    for tier in CROP_TIERS:
        if size_x <= tier and size_y <= tier:
            return tier
    return None


def decide_auto_compressor(size_x: int, size_y: int, use_trans: bool, bpc: int) -> str:
    """
    Rule table:
      - whole-image export (a zero size) -> none
      - transparency, 1/2-bit -> smallest cropN that fits
      - transparency, 4/8-bit -> smallest croplineN that fits
      - no transparency, 4-bit -> rle4
      - anything else -> none
    """
    if size_x == 0 or size_y == 0:
        return "none"
    if use_trans:
        tier = _smallest_tier(size_x, size_y)
        if tier is None:
            return "none"
        return f"crop{tier}" if bpc in (1, 2) else f"cropline{tier}"
    if bpc == 4:
        return "rle4"
    return "none"


def benchmark_compressors(
    prepared: PreparedImage, config: ExportConfig
) -> Tuple[str, Dict[str, Optional[int]]]:
    """
    Measure every compatible candidate. Incompatible or failing candidates
    are recorded as None and never abort the benchmark.
    """
    results: Dict[str, Optional[int]] = {}
    best_name = "none"
    best_size: Optional[int] = None

    log("Start benchmark to find the best compressor")
    for name in BEST_CANDIDATES:
        spec = get_compressor(name)
        issue = compatibility_issue(spec, config.bpc, config.use_trans, prepared.block_size)
        if issue is not None:
            log(f"- Check {spec.label}... Incompatible!")
            if config.debug:
                debug_log(f"  {issue}")
            results[name] = None
            continue
        try:
            size = measure_total_bytes(prepared, replace(config, compressor=name), spec)
        except (SpriteTableError, ValueError) as exc:
            log(f"- Check {spec.label}... Failed!")
            if config.debug:
                debug_log(f"  {exc}")
            results[name] = None
            continue
        log(f"- Check {spec.label}... Generated data: {size:,} bytes")
        results[name] = size
        if best_size is None or size < best_size:
            best_size = size
            best_name = name

    log(f"- Best compressor selected: {get_compressor(best_name).label}")
    return best_name, results


def resolve_compressor(config: ExportConfig, prepared: PreparedImage) -> CompressorSpec:
    spec = get_compressor(config.compressor)
    if spec.name == "rle4" and config.bpc == 8:
        warn("RLE4 compressor has no advantage with 8-bit color. RLE8 will be used instead.")
        return get_compressor("rle8")
    issue = compatibility_issue(spec, config.bpc, config.use_trans, prepared.block_size)
    if issue is not None:
        warn(f"{issue}. {spec.label} compressor removed.")
        return get_compressor("none")
    return spec


def effective_compressor(config: ExportConfig, prepared: PreparedImage) -> CompressorSpec:
    """Resolve the configured selection mode into one concrete variant."""
    if config.selection == "auto":
        w, h = config.size
        name = decide_auto_compressor(w, h, config.use_trans, config.bpc)
        log(f"Auto compress: {get_compressor(name).label} method selected")
        return resolve_compressor(replace(config, compressor=name), prepared)
    if config.selection == "best":
        name, _ = benchmark_compressors(prepared, config)
        return get_compressor(name)
    return resolve_compressor(config, prepared)


__all__ = [
    "decide_auto_compressor",
    "benchmark_compressors",
    "resolve_compressor",
    "effective_compressor",
]
