"""Command line entry point: train or run an A-B-C-D network from a control file."""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

from abcdnet.config import (
    DEFAULT_CONTROL_FILE,
    ControlFile,
    NetworkConfig,
    build_network,
    load_network_config,
    read_control_file,
)
from abcdnet.core.errors import NetworkError
from abcdnet.data import sets
from abcdnet.reporting import (
    CsvSink,
    JsonlSink,
    PlotAdapter,
    comparison_table,
    format_summary,
    network_summary,
    training_summary,
)
from abcdnet.training.trainer import Trainer


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "control_file",
        nargs="?",
        type=Path,
        help=f"Control file to execute (default: {DEFAULT_CONTROL_FILE})",
    )
    parser.add_argument(
        "--metrics-dir",
        type=Path,
        help="Write per-iteration metrics (JSONL and CSV) to this directory while training",
    )
    parser.add_argument(
        "--enable-plots",
        action="store_true",
        help="Plot the training curve into --metrics-dir",
    )
    parser.add_argument("--seed", type=int, help="Seed used when randomizing weights")
    parser.add_argument(
        "--report-every",
        type=int,
        default=20,
        help="Log training progress every N iterations (0 disables)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def _print_table(frame: pd.DataFrame) -> None:
    with pd.option_context("display.precision", 10, "display.width", 200):
        print(frame.to_string())


def _train(control: ControlFile, config: NetworkConfig, args: argparse.Namespace) -> None:
    rng = np.random.default_rng(args.seed) if args.seed is not None else None
    network = build_network(config, rng=rng)
    topology = config.topology

    print("Training network...\n")
    print(f"Using input set file {control.input_set.name}")
    inputs = sets.read_input_set(control.input_set, topology.num_inputs)
    print(f"Using target set file {control.target_set.name}")
    targets = sets.read_target_set(control.target_set, topology.num_outputs)

    callbacks: list[object] = []
    plots: PlotAdapter | None = None
    if args.metrics_dir is not None:
        callbacks.append(JsonlSink(args.metrics_dir / "metrics.jsonl", seed=args.seed))
        callbacks.append(CsvSink(args.metrics_dir / "metrics.csv"))
        plots = PlotAdapter(args.metrics_dir, enable_plots=args.enable_plots)
        callbacks.append(plots)

    trainer = Trainer(
        network,
        config.training,
        checkpoint=config.checkpoint,
        callbacks=callbacks,
        report_every=args.report_every,
    )
    started = time.perf_counter()
    state = trainer.train_on_set(inputs, targets)
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    if plots is not None:
        plots.close()

    print(f"\nMilliseconds elapsed during training = {elapsed_ms:.0f}\n")
    print(format_summary(training_summary(config, state)))
    print(format_summary(network_summary(config, training=True)))
    print()
    _print_table(comparison_table(network.run_on_set(inputs), targets))


def _run(control: ControlFile, config: NetworkConfig, args: argparse.Namespace) -> None:
    rng = np.random.default_rng(args.seed) if args.seed is not None else None
    network = build_network(config, rng=rng)
    topology = config.topology

    print("Running network...\n")
    print(f"Using input set file {control.input_set.name}")
    inputs = sets.read_input_set(control.input_set, topology.num_inputs)
    print(f"Using target set file {control.target_set.name}")
    targets = sets.read_target_set(control.target_set, topology.num_outputs)
    print()
    print(format_summary(network_summary(config)))
    print()
    _print_table(comparison_table(network.run_on_set(inputs), targets))


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.control_file is None:
        control_path = DEFAULT_CONTROL_FILE
        print(f"Using default control filename {control_path}")
    else:
        control_path = args.control_file
        print(f"Using provided control filename {control_path}")

    try:
        control = read_control_file(control_path)
        print(f"Using network configuration file {control.network_config.name}")
        config = load_network_config(control.network_config)
        if control.train:
            _train(control, config, args)
        else:
            _run(control, config, args)
    except (NetworkError, OSError) as exc:
        raise SystemExit(f"An exception has terminated execution:\n\t{exc}") from exc


if __name__ == "__main__":
    main()
