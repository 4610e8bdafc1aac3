"""
Stream recovery pipeline orchestrator: fragments → Base64 → bytes → images.

Coordinates the forward recovery workflow:

1. **Corpus loading**: read every ``page###.txt`` fragment and order
   it by sequence number.
2. **Sanitising**: concatenate the fragments and keep only Base64
   data characters.
3. **Permissive decoding**: decode under the configured
   :class:`DecoderPolicy`, tolerating lost padding and a bad last
   symbol.
4. **Payload scanning**: try to decode JPEG images from the bytes.

Every run starts from scratch and reports its progress as plain log
lines on the result, so a caller can show them as-is.  Failures are
reported, never raised.

Usage::

    from recovery.pipeline import RecoveryConfig, RecoveryPipeline

    pipeline = RecoveryPipeline(RecoveryConfig(corpus_dir="scans/"))
    result = pipeline.run()
    print("\\n".join(result.logs))
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from recovery.corpus.loader import DEFAULT_PREFIX, DEFAULT_SUFFIX, load_corpus
from recovery.corpus.models import FragmentCorpus
from recovery.locator.offset_locator import LocatorResult, locate_offset
from recovery.payload.models import RecoveredPayload, ScanMode
from recovery.payload.scanner import scan_payloads
from recovery.stream.decoder import (
    DecoderPolicy,
    StreamDecodeError,
    dangling_offset,
    decode_permissive,
)
from recovery.stream.sanitizer import sanitize

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Configuration
# ------------------------------------------------------------------


@dataclass
class RecoveryConfig:
    """
    All tuneable parameters for the recovery pipeline.

    Attributes:
        corpus_dir:      Directory holding the fragment files.
        fragment_prefix: File name prefix of a fragment.
        fragment_suffix: File name suffix of a fragment.
        decoder_policy:  Padding / trailing-bit tolerance.
        scan_mode:       Whole-buffer or per-marker image recovery.
        allow_truncated: Accept JPEGs with a missing tail.
        disable_tqdm:    Suppress progress bars.
    """

    corpus_dir: Union[str, Path] = "."
    fragment_prefix: str = DEFAULT_PREFIX
    fragment_suffix: str = DEFAULT_SUFFIX

    decoder_policy: DecoderPolicy = field(default_factory=DecoderPolicy)

    scan_mode: ScanMode = ScanMode.WHOLE_BUFFER
    allow_truncated: bool = False

    disable_tqdm: bool = True


# ------------------------------------------------------------------
# Result
# ------------------------------------------------------------------


@dataclass
class RecoveryResult:
    """
    Everything one forward run produced.

    ``decoded_bytes`` is ``None`` when decoding failed, in which case no
    scan was attempted and ``payloads`` is empty.
    """

    logs: List[str] = field(default_factory=list)
    payloads: List[RecoveredPayload] = field(default_factory=list)
    fragment_count: int = 0
    raw_length: int = 0
    clean_length: int = 0
    decoded_bytes: Optional[bytes] = None
    decode_error: Optional[str] = None

    @property
    def decoded(self) -> bool:
        return self.decoded_bytes is not None

    def summary(self) -> str:
        """Format a human-readable summary of the run."""
        decoded = (
            f"{len(self.decoded_bytes)} bytes"
            if self.decoded_bytes is not None
            else f"FAILED ({self.decode_error})"
        )
        return (
            f"{'=' * 60}\n"
            f"RECOVERY COMPLETE\n"
            f"{'=' * 60}\n"
            f"  Fragments:   {self.fragment_count}\n"
            f"  Raw length:  {self.raw_length} characters\n"
            f"  Clean:       {self.clean_length} characters\n"
            f"  Decoded:     {decoded}\n"
            f"  Images:      {len(self.payloads)}\n"
            f"{'=' * 60}"
        )


# ------------------------------------------------------------------
# Pipeline
# ------------------------------------------------------------------


class RecoveryPipeline:
    """
    End-to-end Base64 stream recovery.

    Holds configuration only; every call reloads the corpus unless one
    is passed in, so results always reflect the fragments on disk.
    """

    def __init__(self, config: Optional[RecoveryConfig] = None):
        self.config = config or RecoveryConfig()

    def _log(self, result: RecoveryResult, message: str, level: int = logging.INFO) -> None:
        result.logs.append(message)
        logger.log(level, message)

    def load_corpus(self) -> FragmentCorpus:
        cfg = self.config
        return load_corpus(
            cfg.corpus_dir,
            prefix=cfg.fragment_prefix,
            suffix=cfg.fragment_suffix,
            disable_tqdm=cfg.disable_tqdm,
        )

    # ------------------------------------------------------------------
    # Forward recovery
    # ------------------------------------------------------------------

    def run(self, corpus: Optional[FragmentCorpus] = None) -> RecoveryResult:
        """
        Recover images from the fragment corpus.

        Args:
            corpus: Snapshot to use; loaded from ``config.corpus_dir`` when
                    omitted.

        Returns:
            :class:`RecoveryResult` with log lines and any payloads.
        """
        cfg = self.config
        result = RecoveryResult()

        # -- Phase 1: Corpus --------------------------------------------
        if corpus is None:
            self._log(
                result,
                f"Scanning {cfg.corpus_dir} for "
                f"{cfg.fragment_prefix}*{cfg.fragment_suffix}...",
            )
            corpus = self.load_corpus()

        for message in corpus.diagnostics:
            self._log(result, message, logging.WARNING)
        for fragment in corpus:
            self._log(result, f"Loaded: {fragment.identifier}")
        result.fragment_count = len(corpus)

        # -- Phase 2: Sanitise ------------------------------------------
        raw = corpus.encoded_stream
        result.raw_length = len(raw)
        self._log(result, f"Total raw length: {result.raw_length} characters")

        clean = sanitize(raw)
        result.clean_length = len(clean)
        self._log(result, f"Cleaned Base64 length: {result.clean_length} characters")

        # -- Phase 3: Decode --------------------------------------------
        try:
            data = decode_permissive(clean, cfg.decoder_policy)
        except StreamDecodeError as e:
            result.decode_error = str(e)
            self._log(
                result,
                f"CRITICAL: Base64 decoding failed even with permissive mode: {e}",
                logging.WARNING,
            )
            return result

        dangling = dangling_offset(clean)
        if dangling is not None and cfg.decoder_policy.drop_dangling_char:
            self._log(
                result,
                f"Dropped dangling final symbol at offset {dangling}",
                logging.WARNING,
            )
        result.decoded_bytes = data
        self._log(result, f"Decoded into {len(data)} bytes of binary data")

        # -- Phase 4: Scan ----------------------------------------------
        report = scan_payloads(
            data,
            mode=cfg.scan_mode,
            allow_truncated=cfg.allow_truncated,
        )
        result.logs.extend(report.logs)
        result.payloads = report.payloads

        logger.debug("\n%s", result.summary())
        return result

    # ------------------------------------------------------------------
    # Offset location
    # ------------------------------------------------------------------

    def locate(self, hex_offset: str, corpus: Optional[FragmentCorpus] = None) -> LocatorResult:
        """Map a hexadecimal byte offset to a fragment position."""
        if corpus is None:
            corpus = self.load_corpus()
        return locate_offset(corpus, hex_offset)
