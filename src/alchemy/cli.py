"""Command line entry point: ``alchemy-randomizer DATABASE [options]``."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from alchemy.data.database import load_database, save_plugin
from alchemy.errors import PatcherError
from alchemy.events.bus import EVENT_CHANGE_LOG_OPEN, EventBus
from alchemy.runner import run_patch
from alchemy.settings import PatcherSettings, RandomizationType
from alchemy.world import create_world

logger = logging.getLogger("alchemy")


def _bool_flag(parser: argparse.ArgumentParser, name: str, help_text: str) -> None:
    parser.add_argument(f"--{name}", dest=name.replace("-", "_"), action=argparse.BooleanOptionalAction, default=None, help=help_text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alchemy-randomizer",
        description="Randomize the effects of alchemy ingredients.",
    )
    parser.add_argument("database", type=Path, help="JSON record database to read plugins from")
    parser.add_argument("--settings", type=Path, help="JSON settings file")
    parser.add_argument(
        "--rand-type",
        choices=[member.value for member in RandomizationType],
        help="Randomization type",
    )
    _bool_flag(parser, "ignore-dist", "Ignore the effect distribution when drawing random effects")
    _bool_flag(parser, "set-esl", "Set the ESL flag on the patch plugin")
    _bool_flag(parser, "show-log", "Print the change log when done")
    parser.add_argument("--patch-file-name", help="Name of the generated patch plugin")
    parser.add_argument("--ignore", dest="ignored_files", action="append", help="Plugin to leave out (repeatable)")
    parser.add_argument("--log-path", type=Path, help="Where to write the change log")
    parser.add_argument("--output", type=Path, help="Where to write the patch plugin JSON")
    parser.add_argument("--seed", type=int, help="Seed for reproducible runs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = PatcherSettings.load(args.settings) if args.settings else PatcherSettings()
        settings = settings.with_overrides(
            rand_type=args.rand_type,
            ignore_dist=args.ignore_dist,
            set_esl=args.set_esl,
            show_log=args.show_log,
            patch_file_name=args.patch_file_name,
            ignored_files=args.ignored_files,
            log_path=args.log_path,
            seed=args.seed,
        )
        bus = EventBus()
        bus.subscribe(EVENT_CHANGE_LOG_OPEN, lambda sender, **payload: print(payload.get("text", "")))
        world = create_world(seed=settings.seed)
        store = load_database(world, args.database)
        result = run_patch(world, bus, settings, store=store)
        output = args.output or args.database.with_name(f"{Path(settings.patch_file_name).stem}.json")
        save_plugin(store, result.plugin_entity, output)
        logger.info("Patched %d ingredients into %s", len(result.patched_records), output)
    except PatcherError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
