"""Command-line entry point.

    gwignite single [--event path.json] [--out-dir out]
    gwignite stream --events data/sniff_stream.ndjson [--out-dir out]
    gwignite demo
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
from rich.console import Console

from ..belief.adapter import bayes_update, normalize
from ..config import LoopConfig, default_config
from ..messages.filter import efficiency
from ..step_pipeline import logging as step_logging
from ..workspace.coherence import coherence
from .events import EventValidationError, parse_line
from .logging import attach_file_logger
from .render import render_summary
from .runner import run_single, run_stream

_OVERRIDES = (
    ("alpha", float),
    ("beta", float),
    ("gamma", float),
    ("c_crit", float),
    ("delta", float),
    ("rg_level", int),
    ("rg_cost", float),
    ("lambda_broadcast", float),
    ("history_capacity", int),
)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--out-dir", type=Path, default=Path("out"))
    parser.add_argument("--log-every", type=int, default=1, help="Print a step line every N events (0 disables).")
    parser.add_argument("--log-file", type=Path, default=None, help="Write JSON step payloads to this file.")
    parser.add_argument("--debug", action="store_true", help="Enable step pipeline debug lines.")
    for name, kind in _OVERRIDES:
        parser.add_argument(f"--{name.replace('_', '-')}", dest=name, type=kind, default=None)


def _config_from_args(args: argparse.Namespace) -> LoopConfig:
    overrides = {name: getattr(args, name) for name, _ in _OVERRIDES if getattr(args, name, None) is not None}
    cfg = default_config().replace(**overrides)
    cfg.validate()
    return cfg


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gwignite", description="Belief update / broadcast ignition loop")
    sub = parser.add_subparsers(dest="command", required=True)

    single = sub.add_parser("single", help="Process one event (the built-in fixture by default).")
    single.add_argument("--event", type=Path, default=None, help="JSON file holding one event object.")
    _add_common(single)

    stream = sub.add_parser("stream", help="Process an NDJSON event stream in order.")
    stream.add_argument("--events", type=Path, default=Path("data/sniff_stream.ndjson"))
    _add_common(stream)

    sub.add_parser("demo", help="Print toy posterior, efficiency and coherence values.")
    return parser


def run_demo(console: Optional[Console] = None) -> None:
    console = console or Console()
    prior = normalize(np.array([0.4, 0.2, 0.2, 0.2]))
    likelihood = normalize(np.array([0.2, 0.6, 0.1, 0.1]))
    post = bayes_update(prior, likelihood)
    console.print(f"Posterior belief: {np.round(post, 6).tolist()}")
    console.print(f"Toy efficiency eta: {efficiency(0.30, 0.25, 0.90):.6f}")
    precisions = np.array([[0.1, 0.7, 0.1, 0.1], [0.2, 0.6, 0.1, 0.1]])
    console.print(f"Toy coherence: {coherence(precisions):.6f}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    console = Console()

    if args.command == "demo":
        run_demo(console)
        return 0

    try:
        cfg = _config_from_args(args)
    except ValueError as exc:
        print(f"gwignite: invalid configuration: {exc}", file=sys.stderr)
        return 2

    step_logging.DEBUG = bool(args.debug)
    if args.log_file is not None:
        attach_file_logger(args.log_file)

    try:
        if args.command == "single":
            event = None
            if args.event is not None:
                event = parse_line(args.event.read_text(encoding="utf-8"))
            summary = run_single(event, args.out_dir, cfg, log_every=args.log_every)
        else:
            summary = run_stream(args.events, args.out_dir, cfg, log_every=args.log_every)
    except EventValidationError as exc:
        print(f"gwignite: rejected event: {exc}", file=sys.stderr)
        return 1

    render_summary(summary, console)
    return 0


if __name__ == "__main__":
    sys.exit(main())
