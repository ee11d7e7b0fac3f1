"""
Main entry point for the combat engine.

Loads the bundled content, builds a battle session, runs it either
interactively or with the automatic player, and prints the combat log and
the result.
"""

import argparse
import logging
from pathlib import Path

from combat_engine.combat.controllers import AutoPlayerController, PlayerController
from combat_engine.combat.session import BattleSession
from combat_engine.core.config import default_settings, load_settings
from combat_engine.core.constants import Difficulty
from combat_engine.core.content import ContentRepository
from combat_engine.core.logging import setup_logging
from combat_engine.core.utils import cprint, crule, make_rng
from combat_engine.ui.cli_interface import PlayerInterface
from combat_engine.ui.report import format_entry, print_log, print_result, status_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a turn-based battle.")
    parser.add_argument("--player", default="hero", help="Player definition id.")
    parser.add_argument(
        "--enemy",
        action="append",
        dest="enemies",
        help="Monster definition id, repeat for more enemies.",
    )
    parser.add_argument(
        "--companion",
        action="append",
        dest="companions",
        default=[],
        help="Companion definition id, repeat for more companions.",
    )
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=Difficulty.NORMAL.value,
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible battle.")
    parser.add_argument("--data", type=Path, default=None, help="Content directory.")
    parser.add_argument("--settings", type=Path, default=None, help="Settings JSON file.")
    parser.add_argument("--interactive", action="store_true", help="Choose the player's actions.")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    crule("Combat Engine", style="bold green")
    content = ContentRepository(args.data, verbose=args.verbose)
    settings = load_settings(args.settings) if args.settings else default_settings()

    controller: PlayerController
    if args.interactive:
        controller = PlayerInterface()
    else:
        controller = AutoPlayerController()

    session = BattleSession.create(
        content,
        args.player,
        args.enemies or ["goblin", "slime"],
        args.companions,
        difficulty=Difficulty(args.difficulty),
        rng=make_rng(args.seed),
        settings=settings,
        controller=controller,
    )

    try:
        if args.interactive:
            printed = 0
            while not session.scheduler.is_over:
                cprint(status_table(session.state))
                session.scheduler.run_round()
                entries = session.state.log.entries
                for entry in entries[printed:]:
                    cprint(format_entry(entry))
                printed = len(entries)
            result = session.finish()
        else:
            session.run()
            result = session.finish()
            print_log(result.log)
    except KeyboardInterrupt:
        cprint("")
        crule(":crossed_swords:  Combat Interrupted", style="bold red")
        return 1

    print_result(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
