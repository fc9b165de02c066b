from __future__ import annotations

import argparse
import logging
import sys
from importlib import metadata

from cuttingstock_core.packing import PackerKind
from cuttingstock_core.resolution import Resolution
from cuttingstock_core.settings import load_settings

from .data.context_repo import try_load_context
from .save import ImageSave, JsonSave, save_all

logger = logging.getLogger("cutting_app")


def _get_app_version() -> str:
    try:
        return metadata.version("cuttingstock")
    except metadata.PackageNotFoundError:
        return "dev"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cuttingstock",
        description="Search low-waste cutting patterns for a 2D cutting-stock context file.",
    )
    parser.add_argument("context", help="context file (LX=, LY=, m=, then 'w h demand' lines)")
    parser.add_argument("-i", "--iterations", type=int, default=10000)
    parser.add_argument(
        "-p",
        "--packer",
        default=PackerKind.GUILLOTINE.value,
        choices=[kind.value for kind in PackerKind],
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--settings", default=None, help="settings.yaml to use")
    parser.add_argument("-o", "--output", default=None, help="output directory")
    parser.add_argument("--no-image", action="store_true", help="skip the PNG rendering")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_get_app_version()}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.iterations <= 0:
        logger.error("--iterations must be a positive integer")
        return 2

    loaded = try_load_context(args.context)
    if not loaded.ok:
        return 2

    settings = load_settings(args.settings)
    resolution = Resolution(loaded.context, settings, seed=args.seed)
    result = resolution.solve(args.iterations, args.packer)

    packer = result.packer_kind.build(resolution.comparators)
    saves = [JsonSave(packer, resolution.method, args.output)]
    if not args.no_image:
        saves.append(ImageSave(packer, resolution.method, args.output))
    written = save_all(result.label, result.solution, loaded.context, saves)

    logger.info(
        "%s: %d patterns, %d sheets, cost %.4f (seed %.4f)",
        result.label,
        result.breakdown.patterns,
        result.breakdown.sheets,
        result.cost,
        result.seed_cost,
    )
    return 0 if all(path is not None for path in written.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
