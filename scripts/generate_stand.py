#!/usr/bin/env python3
"""Run the stand engine on a JSON form and write run artifacts."""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stand_engine import BrandMeta, EngineConfig, load_engine_config, run_form
from stand_engine.export import MESH_FORMATS, SCENE_FORMATS, export_scene
from stand_engine.manufacturing_contract import build_preservation_brief

logger = logging.getLogger("generate_stand")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate a stand request form and build its geometry and contract"
    )
    parser.add_argument("--form", required=True, help="Path to the form JSON")
    parser.add_argument("--name", default="stand", help="Design/run name")
    parser.add_argument("--runs-dir", default="runs", help="Runs output root")
    parser.add_argument("--config", default=None, help="Engine config JSON")
    parser.add_argument("--brand", default=None, help="Brand name (overrides form)")
    parser.add_argument("--product", default=None, help="Product name (overrides form)")
    parser.add_argument("--material", default=None, help="Stand material key or label")
    parser.add_argument(
        "--export-format",
        default="glb",
        choices=SCENE_FORMATS + MESH_FORMATS + ("none",),
        help="Mesh format written next to the contract",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def slugify(value: str) -> str:
    value = re.sub(r"[^a-z0-9]+", "-", value.strip().lower())
    return value.strip("-") or "stand"


def prepare_run_dir(runs_root: str, name: str) -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    run_dir = Path(runs_root) / f"{stamp}_{slugify(name)}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)


def _brand_meta(form: Dict[str, Any], args: argparse.Namespace) -> BrandMeta:
    materials = form.get("materials") or []
    material = args.material or (materials[0] if materials else None)
    return BrandMeta(
        brand=args.brand or form.get("brand") or "Brand",
        product=args.product or form.get("product") or "Product",
        material=material or "plastic",
    )


def _build_summary(run_id: str, status: str, elapsed_s: float, result) -> str:
    lines = [
        f"# Run {run_id}",
        "",
        f"- Status: **{status.upper()}**",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Errors: {len(result.validation.errors)}",
        f"- Warnings: {len(result.validation.warnings)}",
    ]
    if result.scene is not None:
        lines.append(f"- Primitives: {len(result.scene.primitives)}")
        lines.append(f"- Products: {result.scene.total_products}")
        lines.append(f"- Scene issues: {len(result.issues)}")
    lines.append("")
    for message in result.validation.errors:
        lines.append(f"- ERROR: {message}")
    for message in result.validation.warnings:
        lines.append(f"- WARNING: {message}")
    lines.append("")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    started = time.perf_counter()
    form = json.loads(Path(args.form).read_text(encoding="utf-8"))
    config = load_engine_config(args.config) if args.config else EngineConfig()

    try:
        result = run_form(form, _brand_meta(form, args), config)
    except ValueError as exc:
        # SpecNormalizationError or an unknown material label
        logger.error("Form rejected: %s", exc)
        return 2

    run_dir = prepare_run_dir(args.runs_dir, args.name)
    write_json(run_dir / "spec.json", result.spec.to_dict())
    write_json(run_dir / "validation.json", result.validation.to_dict())

    if result.scene is not None:
        write_json(run_dir / "scene.json", result.scene.to_dict())
        write_json(run_dir / "contract.json", result.contract.to_dict())
        write_json(
            run_dir / "brief.json",
            build_preservation_brief(result.contract, result.spec),
        )
        if args.export_format != "none":
            export_scene(result.scene, run_dir / f"model.{args.export_format}")

    elapsed = time.perf_counter() - started
    summary = _build_summary(run_dir.name, result.status, elapsed, result)
    (run_dir / "summary.md").write_text(summary, encoding="utf-8")

    print(f"Run ID: {run_dir.name}")
    print(f"Status: {result.status}")
    print(f"Run dir: {run_dir}")
    return 0 if result.validation.is_valid else 1


if __name__ == "__main__":
    raise SystemExit(main())
