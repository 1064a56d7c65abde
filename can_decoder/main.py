"""
CAN CBOR Decoder - command line entry point.

Reads exported CAN captures (SavvyCAN CSV, candump, or any log format python-can
reads), reassembles multi-frame CBOR messages and prints them. Other modes:

- ``--group``: list frames grouped by CAN ID in time order, optionally hiding
  accounted (CBOR/heartbeat) or unaccounted frames
- ``--compare``: compare unaccounted frame patterns across two or more captures

Reports go to stdout, logging to stderr.
"""
import argparse
import logging
import sys
from typing import List, Optional, Sequence

from capture import metrics
from capture.readers import iter_text_frames
from can_decoder import __version__
from can_decoder.config import ConfigManager
from can_decoder.exceptions import ConfigurationError, CaptureReadError
from can_decoder.services.capture_service import CaptureService, CaptureResult
from can_decoder.services.comparison_service import compare_sources
from can_decoder.services.grouping_service import FrameView, group_frames
from can_decoder.utils.reports import (
    render_banner, render_frame_event, render_grouped, render_capture_summary,
    render_metrics, render_comparison,
)

logger = logging.getLogger(__name__)

STDIN_SOURCE = '<stdin>'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='can-decoder',
        description='Reassemble and decode multi-frame CBOR messages from CAN captures',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Decode a SavvyCAN export
  can-decoder capture.csv

  # Decode a candump log from stdin
  candump -L can0 | can-decoder

  # Show only unaccounted frames grouped by CAN ID
  can-decoder capture.csv --group --hide-accounted

  # Compare unaccounted frames across captures
  can-decoder --compare idle.csv unlock.csv lock.csv
        """
    )
    parser.add_argument('files', nargs='*', help='Capture files (stdin when omitted)')
    parser.add_argument('--group', action='store_true', default=None, dest='group_by_id',
                        help='Print frames grouped by CAN ID after decoding')
    hide = parser.add_mutually_exclusive_group()
    hide.add_argument('--hide-accounted', action='store_true', default=None,
                      help='Grouped view: hide CBOR and heartbeat frames')
    hide.add_argument('--hide-unaccounted', action='store_true', default=None,
                      help='Grouped view: hide frames that are neither CBOR nor heartbeat')
    parser.add_argument('--compare', action='store_true',
                        help='Compare unaccounted frame patterns across two or more files')
    parser.add_argument('--quiet', action='store_false', default=None, dest='show_frames',
                        help='Do not list every frame while decoding')
    parser.add_argument('-v', '--verbose', action='store_true', default=None,
                        help='Annotate frames and print counters')
    policy = parser.add_mutually_exclusive_group()
    policy.add_argument('--lenient-decode', action='store_true', default=None, dest='lenient_decode',
                        help='Keep buffering when CBOR is malformed instead of dropping the buffer')
    policy.add_argument('--strict-decode', action='store_false', dest='lenient_decode',
                        help='Drop malformed CBOR buffers (default)')
    parser.add_argument('--heartbeat-prefix', default=None, dest='heartbeat_id_prefix',
                        help='CAN ID prefix of heartbeat frames (default: 01111)')
    parser.add_argument('--workers', type=int, default=None, dest='max_workers',
                        help='Worker threads for reading captures in compare mode')
    parser.add_argument('--config', default=None, help='Path to JSON config file')
    parser.add_argument('--log-level', default=None,
                        help='Logging level (DEBUG, INFO, WARNING, ERROR)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def _emit(lines: List[str]) -> None:
    for line in lines:
        print(line)


def run_decode(service: CaptureService, config: ConfigManager, files: Sequence[str]) -> int:
    out = config.output_settings
    view = FrameView.from_flags(out.hide_accounted, out.hide_unaccounted)

    def on_frame(frame, message, diagnostics):
        _emit(render_frame_event(frame, message, diagnostics,
                                 verbose=out.verbose, show_frames=out.show_frames))

    _emit(render_banner())
    results: List[CaptureResult] = []
    exit_code = 0
    if not files:
        frames = iter_text_frames(sys.stdin, timestamp_scale=service.settings.savvycan_timestamp_scale)
        results.append(service.process(STDIN_SOURCE, frames, on_frame=on_frame))
    for path in files:
        print(f"Reading {path}")
        try:
            results.append(service.load(path, on_frame=on_frame))
        except CaptureReadError as e:
            logger.error(str(e))
            print(f"Could not read {path}: {e.original_error}")
            exit_code = 1

    for result in results:
        for diag in result.diagnostics:
            if diag.sequence is None:
                print(f"   ! {diag.describe()}")
        if out.group_by_id:
            _emit(render_grouped(group_frames(result.frames, view)))
        _emit(render_capture_summary(result))

    if out.verbose:
        _emit(render_metrics(metrics.get_all()))
    return exit_code


def run_compare(service: CaptureService, config: ConfigManager, files: Sequence[str]) -> int:
    if len(files) < 2:
        print("--compare needs at least two capture files", file=sys.stderr)
        return 2

    results = service.load_many(files, max_workers=config.app_settings.max_workers)
    unreadable = [name for name, r in results.items() if not r.readable]
    report = compare_sources({name: r.frames for name, r in results.items()},
                             max_workers=config.app_settings.max_workers)
    _emit(render_comparison(report, unreadable=unreadable))
    if config.output_settings.verbose:
        _emit(render_metrics(metrics.get_all()))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigManager(args.config)
        config.apply_overrides(
            group_by_id=args.group_by_id,
            hide_accounted=args.hide_accounted,
            hide_unaccounted=args.hide_unaccounted,
            show_frames=args.show_frames,
            verbose=args.verbose,
            lenient_decode=args.lenient_decode,
            heartbeat_id_prefix=args.heartbeat_id_prefix,
            max_workers=args.max_workers,
            log_level=args.log_level.upper() if args.log_level else None,
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.app_settings.log_level)
    logger.info(f"Starting can-decoder {__version__} ({len(args.files)} file(s))")
    service = CaptureService(config.decoder_settings)

    if args.compare:
        return run_compare(service, config, args.files)
    return run_decode(service, config, args.files)


if __name__ == '__main__':
    sys.exit(main())
