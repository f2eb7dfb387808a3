# src/mission_monitor/cli.py
"""
asv-monitor command line interface.

Subcommands:
    replay EVENTS.jsonl   Run a JSON-lines event log through an in-memory monitor
    grid                  Print the labeled grid cells of a variant
    validate              Check a config file's Mission and Store sections
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import yaml

from mission_monitor.config_validator import validate_mission_config
from mission_monitor.grid_generator import GridGenerator
from mission_monitor.mission_config import MissionConfig
from mission_monitor.mission_monitor import MissionMonitor
from mission_monitor.mission_store import InMemoryMissionStore
from mission_monitor.parameters import Parameters

logger = logging.getLogger(__name__)


def _load_mission_config(config_path: Optional[str]) -> MissionConfig:
    if config_path:
        Parameters.load_config(config_path)
    return Parameters.mission_config()


async def _replay(events_path: str, config: MissionConfig, variant_id: Optional[str]) -> InMemoryMissionStore:
    store = InMemoryMissionStore(map_state={'view_type': variant_id})
    monitor = MissionMonitor(config, store)
    await monitor.start()

    with open(events_path, 'r', encoding='utf-8') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                payload = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"[Replay] Line {line_no}: invalid JSON ({e.msg})")
                continue
            await monitor.handle_raw(payload)

    print(f"\n[INFO] Variant: {monitor.variant.variant_id}")
    print(f"[INFO] Events handled: {monitor.events_handled}, dropped: {monitor.events_dropped}")
    print("[INFO] Final status:")
    for phase, value in monitor.status:
        print(f"  {phase.value:<18} {value.value}")
    print(f"[INFO] Writes ({len(store.writes)}):")
    for fields in store.writes:
        print(f"  {json.dumps(fields)}")
    print(f"[INFO] Track points: {len(monitor.track)}")

    await monitor.close()
    return store


def cmd_replay(args: argparse.Namespace) -> int:
    try:
        config = _load_mission_config(args.config)
    except (OSError, yaml.YAMLError, ValueError) as e:
        print(f"[ERROR] Cannot load configuration: {e}")
        return 1
    try:
        asyncio.run(_replay(args.events, config, args.variant))
    except OSError as e:
        print(f"[ERROR] Cannot read event log: {e}")
        return 1
    return 0


def cmd_grid(args: argparse.Namespace) -> int:
    try:
        config = _load_mission_config(args.config)
    except (OSError, yaml.YAMLError, ValueError) as e:
        print(f"[ERROR] Cannot load configuration: {e}")
        return 1
    variant = config.resolve_variant(args.variant)
    try:
        grid = GridGenerator(config.cell_size_m, config.divisions).generate(variant)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return 1

    print(f"[INFO] Grid '{grid.variant_id}': {grid.divisions}x{grid.divisions} cells, "
          f"{grid.footprint_m:g} m, bearing {variant.grid_bearing_deg:g} deg")
    for cell in grid.cells:
        print(f"  {cell.label:<4} {cell.center.latitude:.7f} {cell.center.longitude:.7f}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        with open(args.config, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        print(f"[ERROR] Cannot read {args.config}: {e}")
        return 1
    if not isinstance(raw, dict):
        print(f"[ERROR] {args.config}: top level must be a mapping")
        return 1

    ok = validate_mission_config(raw)
    try:
        config = MissionConfig.from_dict(raw)
    except ValueError as e:
        print(f"[ERROR] {e}")
        return 1
    if not ok:
        print(f"[WARNING] {args.config}: validation failed, see log output")
        return 1
    print(f"[INFO] {args.config}: OK ({len(config.variants)} variant(s), "
          f"default '{config.default_variant_id}')")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asv-monitor",
                                     description="ASV mission monitor tools")
    parser.add_argument("--log-level", default=None, help="Logging level (default: from config or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    replay = subparsers.add_parser("replay", help="Replay a JSON-lines event log")
    replay.add_argument("events", help="Path to the JSON-lines event file")
    replay.add_argument("--config", type=str, help="Path to config.yaml")
    replay.add_argument("--variant", type=str, help="Initial variant id")
    replay.set_defaults(func=cmd_replay)

    grid = subparsers.add_parser("grid", help="Print the grid cells of a variant")
    grid.add_argument("--variant", type=str, help="Variant id (default: configured default)")
    grid.add_argument("--config", type=str, help="Path to config.yaml")
    grid.set_defaults(func=cmd_grid)

    validate = subparsers.add_parser("validate", help="Validate a config file")
    validate.add_argument("--config", type=str, default=Parameters._config_file or "configs/config.yaml",
                          help="Path to config.yaml")
    validate.set_defaults(func=cmd_validate)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level_name = str(args.log_level or Parameters.LOG_LEVEL).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO),
                        format=Parameters.LOG_FORMAT)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
