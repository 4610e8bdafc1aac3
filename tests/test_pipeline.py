"""
End-to-end tests for the recovery pipeline.

Usage:
    python -m pytest tests/test_pipeline.py
"""

import logging

from recovery.corpus.loader import corpus_from_texts
from recovery.payload.models import ScanMode
from recovery.pipeline import RecoveryConfig, RecoveryPipeline
from recovery.stream.decoder import DecoderPolicy

from conftest import make_jpeg, wrap_base64


def test_hello_world_corpus():
    corpus = corpus_from_texts({"page001.txt": "SGVsbG8sIFdvcmxkIQ=="})
    result = RecoveryPipeline().run(corpus)

    assert result.decoded_bytes == b"Hello, World!"
    assert result.raw_length == 20
    assert result.clean_length == 18
    assert "Decoded into 13 bytes of binary data" in result.logs
    # not an image: reported, not raised
    assert result.payloads == []
    assert result.logs[-1].startswith("-> FAILED to decode image: ")


def test_recovers_jpeg_split_across_pages(write_fragments, jpeg_bytes):
    lines = wrap_base64(jpeg_bytes).splitlines()
    half = len(lines) // 2
    directory = write_fragments(
        {
            "page002.txt": "\n".join(lines[half:]) + "\n",
            "page001.txt": "\n".join(lines[:half]) + "\n",
        }
    )

    result = RecoveryPipeline(RecoveryConfig(corpus_dir=directory)).run()

    assert len(result.payloads) == 1
    assert result.payloads[0].size == (16, 8)
    assert result.logs[0].startswith("Scanning ")
    assert "Loaded: page001.txt" in result.logs
    assert "Loaded: page002.txt" in result.logs
    assert result.logs.index("Loaded: page001.txt") < result.logs.index("Loaded: page002.txt")
    assert result.logs[-1].startswith("-> SUCCESS: Recovered image")


def test_transcription_noise_is_ignored(jpeg_bytes):
    noisy = wrap_base64(jpeg_bytes).replace("\n", " ~\r\n").rstrip("=") + "\n= ="
    corpus = corpus_from_texts({"page001.txt": noisy})

    result = RecoveryPipeline().run(corpus)

    assert result.decoded_bytes == jpeg_bytes
    assert len(result.payloads) == 1


def test_decode_failure_stops_before_scan():
    corpus = corpus_from_texts({"page001.txt": "QUJDR"})
    result = RecoveryPipeline().run(corpus)

    assert not result.decoded
    assert result.payloads == []
    assert "dangling" in result.decode_error
    assert result.logs[-1].startswith(
        "CRITICAL: Base64 decoding failed even with permissive mode: "
    )
    assert "FAILED (" in result.summary()


def test_decoder_policy_comes_from_config():
    corpus = corpus_from_texts({"page001.txt": "QUJDR"})
    config = RecoveryConfig(decoder_policy=DecoderPolicy(drop_dangling_char=True))
    result = RecoveryPipeline(config).run(corpus)
    assert result.decoded_bytes == b"ABC"
    assert "Dropped dangling final symbol at offset 4" in result.logs
    assert result.logs.index("Dropped dangling final symbol at offset 4") < result.logs.index(
        "Decoded into 3 bytes of binary data"
    )


def test_decoded_stream_without_dangling_symbol_logs_no_drop():
    corpus = corpus_from_texts({"page001.txt": "QUJD"})
    config = RecoveryConfig(decoder_policy=DecoderPolicy(drop_dangling_char=True))
    result = RecoveryPipeline(config).run(corpus)
    assert not any(line.startswith("Dropped") for line in result.logs)


def test_marker_scan_through_pipeline():
    data = make_jpeg(8, 8) + make_jpeg(16, 16, color=(10, 200, 10))
    corpus = corpus_from_texts({"page001.txt": wrap_base64(data)})
    config = RecoveryConfig(scan_mode=ScanMode.MARKERS)

    result = RecoveryPipeline(config).run(corpus)

    assert [p.size for p in result.payloads] == [(8, 8), (16, 16)]


def test_runs_are_independent(write_fragments, jpeg_bytes):
    directory = write_fragments({"page001.txt": wrap_base64(jpeg_bytes)})
    pipeline = RecoveryPipeline(RecoveryConfig(corpus_dir=directory))

    first = pipeline.run()
    assert len(first.payloads) == 1

    (directory / "page001.txt").write_text("QUJDR")
    second = pipeline.run()
    assert second.payloads == []
    assert len(first.payloads) == 1

    (directory / "page001.txt").write_text(wrap_base64(jpeg_bytes))
    third = pipeline.run()
    assert third.logs == first.logs


def test_skipped_fragment_is_logged(write_fragments):
    directory = write_fragments({"page001.txt": "SGVsbG8sIFdvcmxkIQ"})
    (directory / "page002.txt").write_bytes(b"\xff\xfe\xfa")

    result = RecoveryPipeline(RecoveryConfig(corpus_dir=directory)).run()

    assert any(line.startswith("Skipped: page002.txt") for line in result.logs)
    assert result.decoded_bytes == b"Hello, World!"


def test_locate_through_pipeline(write_fragments):
    directory = write_fragments({"page002.txt": "REVG", "page001.txt": "QUJD"})
    pipeline = RecoveryPipeline(RecoveryConfig(corpus_dir=directory))

    result = pipeline.locate("0x3")
    assert result.fragment_sequence_number == 2
    assert result.character_index == 0


def test_decode_failure_is_logged_as_warning(caplog):
    corpus = corpus_from_texts({"page001.txt": "QUJDR"})
    with caplog.at_level(logging.DEBUG, logger="recovery"):
        RecoveryPipeline().run(corpus)

    failures = [r for r in caplog.records if r.getMessage().startswith("CRITICAL: ")]
    assert [r.levelno for r in failures] == [logging.WARNING]
