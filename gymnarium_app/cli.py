"""Command-line interface entry-point.

Usage examples
--------------
Run headless for 20 episodes:
    gymnarium-app command_line -e gym_mountaincar -x epsdone -y count_of_episodes=20

Replay a stored run description (flags override the file):
    gymnarium-app command_line --config cfgs/mountain_car.yaml -s 42

Answer the prompts one after the other:
    gymnarium-app interactive

Show every variant with its aliases and options:
    gymnarium-app list
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from .catalog import Category, describe_variant, variants
from .config import HarnessConfig, RunOptions
from .errors import HarnessError
from .factory import build_components
from .pipeline import ConsolePrompter, Selections, prompt_run_options, select_interactively, selections_from_config
from .simulator.engine import SimulationDriver, SimulationResult

logger = logging.getLogger(__name__)

# command_line flags that map one-to-one onto HarnessConfig fields
_CONFIG_FIELDS = (
    "environment",
    "environment_configuration",
    "agent",
    "agent_configuration",
    "visualiser",
    "visualiser_configuration",
    "exit_condition",
    "exit_condition_configuration",
    "seed",
    "reset_agent_on_done",
    "environment_load_path",
    "environment_store_path",
    "agent_load_path",
    "agent_store_path",
)


def _parse_args(argv: List[str] | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gymnarium-app",
        description="Combine an environment, an agent, a visualiser and an exit condition and run them.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Verbosity of the log output on stderr",
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # ------------------------------------------------------------------
    # command_line
    # ------------------------------------------------------------------
    p_cmd = subparsers.add_parser("command_line", help="Take every choice from the flags below")
    p_cmd.add_argument("--config", type=Path, default=None, help="YAML run description; flags given here override it")
    p_cmd.add_argument("-e", "--environment", default=None, help="Environment to simulate (any alias)")
    p_cmd.add_argument("-f", "--environment-configuration", default=None, help="key=value;... options of the environment")
    p_cmd.add_argument("-a", "--agent", default=None, help="Agent acting in the environment [default: Random]")
    p_cmd.add_argument("-b", "--agent-configuration", default=None, help="key=value;... options of the agent")
    p_cmd.add_argument("-v", "--visualiser", default=None, help="Visualiser to render with [default: None]")
    p_cmd.add_argument("-w", "--visualiser-configuration", default=None, help="key=value;... options of the visualiser")
    p_cmd.add_argument(
        "-x", "--exit-condition", default=None, help="When to stop [default: episodes done simulating]"
    )
    p_cmd.add_argument("-y", "--exit-condition-configuration", default=None, help="key=value;... options of the exit condition")
    p_cmd.add_argument("-s", "--seed", default=None, help="Seed for the random number generators")
    p_cmd.add_argument(
        "-r",
        "--not-reset-environment-on-done",
        action="store_true",
        default=None,
        help="Keep stepping the environment after it reports done",
    )
    p_cmd.add_argument(
        "-q", "--reset-agent-on-done", action="store_true", default=None, help="Reset the agent whenever an episode ends"
    )
    p_cmd.add_argument("-j", "--environment-load-path", default=None, help="Load the environment state from this file")
    p_cmd.add_argument("-p", "--environment-store-path", default=None, help="Store the environment state to this file")
    p_cmd.add_argument("-i", "--agent-load-path", default=None, help="Load the agent state from this file")
    p_cmd.add_argument("-o", "--agent-store-path", default=None, help="Store the agent state to this file")
    p_cmd.add_argument(
        "--lenient",
        action="store_true",
        help="Only warn about combinations that are not meant to go together",
    )

    # ------------------------------------------------------------------
    # interactive
    # ------------------------------------------------------------------
    subparsers.add_parser("interactive", help="Ask for every choice on the console")

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------
    subparsers.add_parser("list", help="Print all variants with their aliases and options")
    return parser


def config_from_args(args: argparse.Namespace) -> HarnessConfig:
    """Start from ``--config`` (or the defaults) and apply every flag that was given."""
    cfg = HarnessConfig.from_yaml(args.config) if args.config is not None else HarnessConfig(environment="")
    for name in _CONFIG_FIELDS:
        value = getattr(args, name)
        if value is not None:
            setattr(cfg, name, value)
    if args.not_reset_environment_on_done:
        cfg.reset_environment_on_done = False
    if args.lenient:
        cfg.strict_compatibility = False

    return cfg


def list_variants() -> str:
    blocks = []
    for category in Category:
        blocks.append(category.headline)
        blocks.append("-" * len(category.headline))
        blocks.extend(describe_variant(variant) for variant in variants(category))
        blocks.append("")
    return "\n".join(blocks)


def start(selections: Selections, run_options: RunOptions) -> SimulationResult:
    """Build the selected components and drive them until the exit condition fires."""
    print(
        f'[INFO] Simulating environment "{selections.environment.corresponding_available}" '
        f'with agent "{selections.agent.corresponding_available}" '
        f'in visualiser "{selections.visualiser.corresponding_available}" '
        f'until "{selections.exit_condition.corresponding_available}", '
        f"{run_options.describe()}."
    )
    components = build_components(selections)
    driver = SimulationDriver(
        components.environment,
        components.agent,
        components.visualiser,
        components.exit_condition,
        run_options,
    )
    result = driver.run()
    print(
        f"[INFO] Finished after {result.episodes} episode(s), "
        f"{result.total_steps} step(s) in total (seed entropy {result.seed_entropy})."
    )
    return result


def main(argv: List[str] | None = None) -> int:
    """Main entry point for the command-line interface."""
    parser = _parse_args(argv)
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.cmd == "list":
        print(list_variants())
        return 0

    try:
        if args.cmd == "command_line":
            cfg = config_from_args(args)
            if not cfg.environment:
                parser.error("command_line needs an environment (-e or --config)")
            selections = selections_from_config(cfg)
            run_options = cfg.to_run_options()
        else:
            prompter = ConsolePrompter()
            selections = select_interactively(prompter)
            run_options = prompt_run_options(prompter)
        start(selections, run_options)
    except HarnessError as exc:
        logger.debug("Aborting", exc_info=True)
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("[INFO] Interrupted", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
