"""
Mixer command-line interface.

Default output is C-style #define code for inclusion in, or loading
onto, the flight controller. -m produces an INI-format .mix file for
ground-station motor-mix configurators. A bare -o names the output
file after the craft.

Usage:
    multirotor-mixer crafts.xml
    multirotor-mixer -c my_hex -m -o my_hex.mix crafts.xml
    multirotor-mixer -c my_hex -p -o crafts.xml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from multirotor_mixer.config import MixerConfig, OutputFormat
from multirotor_mixer.errors import MixerError
from multirotor_mixer.export.formatters import TOOL_VERSION
from multirotor_mixer.pipeline import MixerPipeline

logger = logging.getLogger(__name__)

_AUTO_NAME = ""  # sentinel for a bare -o
_DESCRIPTION_SUFFIXES = (".xml", ".yaml", ".yml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multirotor-mixer",
        description="Compute mass properties and motor mixing tables for a multirotor craft",
    )
    parser.add_argument('file', type=str, nargs='?', default=None,
                        help='Craft description (.xml, .yaml or .yml)')
    parser.add_argument('-v', '--version', action='version', version=TOOL_VERSION)
    parser.add_argument('-d', '--debug', action='store_true',
                        help='Log the resolved craft and intermediate matrices')
    parser.add_argument('-c', '--craft-id', type=str, default=None,
                        help='Craft to compute (default: first craft in the file)')
    parser.add_argument('-p', '--pid', action='store_true',
                        help='Emit the normalised PID mixing table instead of Mt, M and J')
    parser.add_argument('-m', '--mix', action='store_true',
                        help='Emit an INI .mix file instead of #define constants')
    parser.add_argument('-o', '--output', nargs='?', const=_AUTO_NAME, default=None,
                        help='Write to a file; without a name, use <craft_id>.mix or <craft_id>.param')
    parser.add_argument('--strict', action='store_true',
                        help='Fail on low-rank axis solves instead of returning best effort')
    parser.add_argument('--cell-size', type=float, default=None,
                        help='Edge length in meters of the cells used to integrate solid objects')
    return parser


def cli_main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # a bare -o directly before the description takes it as its value
    if args.file is None and args.output and Path(args.output).suffix.lower() in _DESCRIPTION_SUFFIXES:
        args.file, args.output = args.output, _AUTO_NAME
    if args.file is None:
        parser.error("the following arguments are required: file")

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    output_format = OutputFormat.MIX if args.mix else (OutputFormat.PID if args.pid else OutputFormat.PARAM)
    config_kwargs = dict(strict=args.strict, output_format=output_format, use_pid=args.pid)
    if args.cell_size is not None:
        config_kwargs['cell_size_m'] = args.cell_size

    try:
        config = MixerConfig(**config_kwargs)
        pipeline = MixerPipeline(config)
        spec = pipeline.loader.load(args.file, args.craft_id)
        if args.debug:
            logger.debug(f"Resolved craft:\n{spec.summary()}")
        result = pipeline.run(spec)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except MixerError as e:
        logger.error(str(e))
        return 1

    output = args.output
    if output == _AUTO_NAME:
        output = f"{spec.identifier}{config.output_format.file_suffix}"

    text = result.report().render(filepath=output)
    if output is None:
        sys.stdout.write(text)
    else:
        logger.info(f"Output written to {Path(output)}")

    return 0


if __name__ == '__main__':
    sys.exit(cli_main())
