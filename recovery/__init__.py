"""
Base64 stream recovery.

Reassembles transcribed Base64 fragments into one byte stream, decodes
it permissively, recovers embedded JPEG images, and maps binary
offsets back to transcription positions for correction.
"""

from .pipeline import RecoveryConfig, RecoveryPipeline, RecoveryResult

__all__ = [
    "RecoveryConfig",
    "RecoveryPipeline",
    "RecoveryResult",
]
