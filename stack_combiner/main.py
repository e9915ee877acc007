#!/usr/bin/env python3
"""
Main entry point for the Stack Combiner application.

Loads two datasets, adds them over their common region and presents the
inputs together with the result.
"""

import sys
import argparse
import logging

from stack_combiner.utils.logger import setup_logger, LogCapture
from stack_combiner.utils.config import load_config, save_config, add_recent_file
from stack_combiner.core.image_loader import ImageLoader
from stack_combiner.core.combiner import DatasetCombiner, CombineError, Strategy

LOAD_FAILED = "Load dataset failed."


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Add two datasets over their common region')

    parser.add_argument('first', nargs='?', help='Path to the first dataset')
    parser.add_argument('second', nargs='?', help='Path to the second dataset')
    parser.add_argument('--strategy', '-s', choices=[s.value for s in Strategy],
                        help='How to sweep the datasets (default from configuration)')
    parser.add_argument('--jobs', '-j', type=int,
                        help='Worker threads for the parallel strategy, -1 for all cores')
    parser.add_argument('--output', '-o', type=str, help='Save the result to a TIFF file')
    parser.add_argument('--no-display', action='store_true',
                        help='Log dataset summaries instead of opening windows')
    parser.add_argument('--debug', '-d', action='store_true', help='Enable debug mode')
    parser.add_argument('--config', '-c', type=str, help='Path to configuration file')
    parser.add_argument('--no-log-file', action='store_true', help='Log to the console only')

    return parser.parse_args(argv)


def log_dataset(name, dataset, logger=None):
    """Present a dataset by logging its summary."""
    logger = logger or logging.getLogger('stack_combiner')
    info = dataset.summary()
    logger.info(
        f"{name}: shape={info['shape']} axes={info['axes']} dtype={info['dtype']} "
        f"min={info['min']} max={info['max']} mean={info['mean']}"
    )


def unique_label(label, taken):
    """Return label, suffixed with a counter if it is already taken."""
    candidate = label
    n = 2
    while candidate in taken:
        candidate = f"{label} ({n})"
        n += 1
    return candidate


def run(load, show, report, combiner, logger=None, show_inputs=True):
    """Load two datasets, add them and show the inputs and the result.

    Returns the result dataset, or None if a dataset could not be loaded or
    the datasets could not be added. Failures are passed to report.
    """
    logger = logger or logging.getLogger('stack_combiner')

    first = load()
    if first is None:
        report(LOAD_FAILED)
        return None

    second = load()
    if second is None:
        report(LOAD_FAILED)
        return None

    if first.rank != second.rank:
        logger.warning(
            f"Datasets have {first.rank} and {second.rank} dimensions, "
            f"adding over the first {min(first.rank, second.rank)}"
        )

    try:
        with LogCapture(logger, f"{combiner.strategy.value} addition"):
            result = combiner.combine(first, second)
    except CombineError as e:
        report(f"Could not add datasets: {e}")
        return None

    shown = [(f"Result: {combiner.strategy.value}", result)]
    if show_inputs:
        shown = [(first.name, first), (second.name, second)] + shown

    labels = []
    for label, dataset in shown:
        label = unique_label(label, labels)
        labels.append(label)
        show(label, dataset)

    return result


def main(argv=None):
    """Application entry point."""
    args = parse_arguments(argv)

    logger = setup_logger(args.debug, log_to_file=not args.no_log_file)
    logger.info("Starting Stack Combiner")

    config = load_config(args.config)

    try:
        combiner = DatasetCombiner.from_config(
            config, logger, strategy=args.strategy, n_jobs=args.jobs
        )
    except (ValueError, TypeError) as e:
        logger.error(f"Invalid processing settings: {e}")
        return 1

    loader = ImageLoader(logger)
    paths = [args.first, args.second]

    display = None
    if config['display']['enabled'] and not args.no_display:
        from stack_combiner.gui.display import DisplayManager
        display = DisplayManager(config, logger)

    def load():
        path = paths.pop(0) if paths else None
        if path is None and display is not None:
            path = display.choose_file("Open Dataset", loader.get_supported_formats_filter())
        if path is None:
            logger.error("No dataset given")
            return None

        dataset = loader.load_file(path)
        if dataset is not None:
            add_recent_file(config, str(path))
        return dataset

    if display is not None:
        show, report = display.show_dataset, display.show_message
    else:
        show, report = (lambda name, dataset: log_dataset(name, dataset, logger)), logger.error

    result = run(load, show, report, combiner, logger,
                 show_inputs=config['display']['show_inputs'])

    exit_code = 0 if result is not None else 1
    if result is not None and args.output:
        if not result.save_tiff(args.output):
            exit_code = 1

    if display is not None and result is not None:
        exit_code = display.exec() or exit_code

    # Save configuration on exit
    save_config(config, args.config)

    logger.info(f"Application exiting with code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
