#!/usr/bin/env python3
"""
Base64 stream recovery: CLI entry point.

Reassembles transcribed ``page###.txt`` fragments into one Base64
stream, decodes it permissively and recovers the JPEG images inside,
or maps a byte offset of the original binary back to a page and
character for correction.

Usage::

    python recover.py scans/
    python recover.py scans/ --scan markers --allow-truncated
    python recover.py scans/ --seek 0x2E1B
    python recover.py scans/ --check-lines
    python recover.py scans/ --seed-from book.pdf
    python recover.py scans/ --latest

Verbosity levels::

    -v 0   Quiet: warnings and errors only.
    -v 1   Normal: pipeline log lines (default).
    -v 2   Debug: per-fragment and per-segment detail.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from recovery.corpus.diagnostics import LineStatus, check_lines, find_next_ambiguous
from recovery.corpus.seeding import seed_fragments
from recovery.corpus.store import latest_sequence_number
from recovery.payload.models import ScanMode
from recovery.pipeline import RecoveryConfig, RecoveryPipeline
from recovery.stream.decoder import DecoderPolicy
from recovery.utils.pdf_adapter import PDFTextAdapter

logger = logging.getLogger("recovery")

# Mapping from --verbose integer to logging level
_VERBOSITY_MAP = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}


# ------------------------------------------------------------------
# Argument parsing
# ------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser with all pipeline options."""
    p = argparse.ArgumentParser(
        description="Recover JPEG images from transcribed Base64 page fragments.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  python recover.py scans/\n"
            "  python recover.py scans/ --scan markers\n"
            "  python recover.py scans/ --seek 0x2E1B\n"
            "  python recover.py scans/ --seed-from book.pdf\n"
        ),
    )

    # -- Positional --------------------------------------------------------
    p.add_argument(
        "corpus",
        nargs="?",
        default=".",
        help="Directory holding the page###.txt fragments (default: .)",
    )

    # -- Fragments ---------------------------------------------------------
    fragments = p.add_argument_group("fragments")
    fragments.add_argument(
        "--prefix",
        default="page",
        help="Fragment file name prefix (default: page)",
    )
    fragments.add_argument(
        "--suffix",
        default=".txt",
        help="Fragment file name suffix (default: .txt)",
    )
    fragments.add_argument(
        "--seed-from",
        default=None,
        metavar="PDF",
        help="Write a fragment from the PDF text layer for every page without one, then exit",
    )
    fragments.add_argument(
        "--latest",
        action="store_true",
        help="Print the highest saved page number, then exit",
    )
    fragments.add_argument(
        "--check-lines",
        action="store_true",
        help="Report lines that are not clean 76-character Base64 lines, then exit",
    )

    # -- Decoding ----------------------------------------------------------
    decoding = p.add_argument_group("decoding")
    decoding.add_argument(
        "--strict-padding",
        action="store_true",
        help="Reject streams whose length needs padding",
    )
    decoding.add_argument(
        "--strict-bits",
        action="store_true",
        help="Reject a final symbol with non-zero trailing bits",
    )
    decoding.add_argument(
        "--drop-dangling",
        action="store_true",
        help="Discard a lone final symbol instead of failing",
    )

    # -- Images ------------------------------------------------------------
    images = p.add_argument_group("images")
    images.add_argument(
        "--scan",
        choices=[m.value for m in ScanMode],
        default=ScanMode.WHOLE_BUFFER.value,
        help="whole: one attempt over the buffer; markers: one per JPEG marker (default: whole)",
    )
    images.add_argument(
        "--allow-truncated",
        action="store_true",
        help="Accept JPEGs whose tail is missing",
    )

    # -- Locator -----------------------------------------------------------
    p.add_argument(
        "--seek",
        default=None,
        metavar="HEX",
        help="Locate a byte offset of the original binary (e.g. 0x2E1B) instead of decoding",
    )

    # -- Output control ----------------------------------------------------
    debug = p.add_argument_group("output")
    debug.add_argument(
        "-v",
        "--verbose",
        type=int,
        choices=[0, 1, 2],
        default=1,
        help="Verbosity: 0=quiet, 1=normal (default), 2=debug",
    )
    debug.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable tqdm progress bars",
    )

    return p


# ------------------------------------------------------------------
# Logging setup
# ------------------------------------------------------------------


def _configure_logging(verbosity: int) -> None:
    """
    Set up the root ``recovery`` logger.

    At verbosity 0 (WARNING), uses a minimal format. At 2 (DEBUG),
    includes timestamps and the module name.
    """
    level = _VERBOSITY_MAP.get(verbosity, logging.INFO)

    if level <= logging.DEBUG:
        fmt = "%(asctime)s %(name)s %(levelname)s: %(message)s"
        datefmt = "%H:%M:%S"
    elif level <= logging.INFO:
        fmt = "%(message)s"
        datefmt = None
    else:
        fmt = "%(levelname)s: %(message)s"
        datefmt = None

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger("recovery")
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("PIL").setLevel(logging.WARNING)


# ------------------------------------------------------------------
# Sub-commands
# ------------------------------------------------------------------


def _cmd_seed(pipeline: RecoveryPipeline, pdf_path: str) -> int:
    cfg = pipeline.config
    with PDFTextAdapter(pdf_path) as pdf:
        written = seed_fragments(pdf, cfg.corpus_dir, cfg.fragment_prefix, cfg.fragment_suffix)
    for path in written:
        logger.info("  %s", path.name)
    return 0


def _ambiguous_positions(text: str) -> List[int]:
    positions = []
    index = find_next_ambiguous(text, -1)
    while index is not None:
        positions.append(index)
        index = find_next_ambiguous(text, index)
    return positions


def _cmd_latest(pipeline: RecoveryPipeline) -> int:
    """Print the last saved page, where transcription resumes."""
    cfg = pipeline.config
    latest = latest_sequence_number(cfg.corpus_dir, cfg.fragment_prefix, cfg.fragment_suffix)
    if not latest:
        print("No saved pages")
        return 1
    print(f"Last saved page: {latest}")
    return 0


def _cmd_check_lines(pipeline: RecoveryPipeline) -> int:
    """Print suspicious lines per fragment. Exit 1 if any line is invalid."""
    corpus = pipeline.load_corpus()
    invalid_total = 0
    for fragment in corpus:
        summary = check_lines(fragment.raw_text)
        counts = summary.counts
        invalid_total += counts[LineStatus.INVALID]
        ambiguous = _ambiguous_positions(fragment.raw_text)
        logger.info(
            "%s: %d full, %d partial, %d invalid, %d ambiguous I/l/1",
            fragment.identifier,
            counts[LineStatus.FULL],
            counts[LineStatus.PARTIAL],
            counts[LineStatus.INVALID],
            len(ambiguous),
        )
        if ambiguous:
            logger.debug("  ambiguous glyphs at %s", ", ".join(map(str, ambiguous)))
        for report in summary.reports:
            if report.status is LineStatus.INVALID:
                logger.warning(
                    "  line %d: %d invalid characters",
                    report.line_number + 1,
                    report.invalid_count,
                )
            elif report.status is LineStatus.PARTIAL:
                logger.debug("  line %d: %d characters", report.line_number + 1, report.length)
    return 1 if invalid_total else 0


def _cmd_seek(pipeline: RecoveryPipeline, hex_offset: str) -> int:
    result = pipeline.locate(hex_offset)
    print(result.message)
    return 0 if result.found else 1


def _cmd_recover(pipeline: RecoveryPipeline) -> int:
    result = pipeline.run()
    logger.info("\n%s", result.summary())
    for number, payload in enumerate(result.payloads, start=1):
        print(
            f"Segment #{number}: {payload.width}x{payload.height} {payload.mode} "
            f"at 0x{payload.offset:X} ({payload.length} bytes)"
        )
    if not result.payloads:
        logger.warning("No images recovered.")
        return 1
    return 0


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------


def main() -> int:
    """Parse arguments, configure logging, and run the requested command."""
    parser = _build_parser()
    args = parser.parse_args()

    _configure_logging(args.verbose)

    corpus_dir = Path(args.corpus)
    if not corpus_dir.is_dir():
        parser.error(f"Corpus directory not found: {corpus_dir}")

    config = RecoveryConfig(
        corpus_dir=corpus_dir,
        fragment_prefix=args.prefix,
        fragment_suffix=args.suffix,
        decoder_policy=DecoderPolicy(
            allow_missing_padding=not args.strict_padding,
            allow_trailing_bits=not args.strict_bits,
            drop_dangling_char=args.drop_dangling,
        ),
        scan_mode=ScanMode(args.scan),
        allow_truncated=args.allow_truncated,
        disable_tqdm=args.no_progress or args.verbose == 0,
    )
    pipeline = RecoveryPipeline(config)

    if args.seed_from:
        pdf_path = Path(args.seed_from)
        if not pdf_path.exists():
            parser.error(f"PDF not found: {pdf_path}")
        try:
            return _cmd_seed(pipeline, str(pdf_path))
        except RuntimeError as e:
            parser.error(str(e))
    if args.latest:
        return _cmd_latest(pipeline)
    if args.check_lines:
        return _cmd_check_lines(pipeline)
    if args.seek is not None:
        return _cmd_seek(pipeline, args.seek)
    return _cmd_recover(pipeline)


if __name__ == "__main__":
    sys.exit(main())
