"""Minimal RIFF/WAVE container for raw PCM returned by the TTS model."""
import struct
from typing import NamedTuple

HEADER_SIZE = 44
DEFAULT_SAMPLE_RATE = 24000

# RIFF, fileSize, WAVE, "fmt ", fmt size, format, channels, rate,
# byteRate, blockAlign, bitsPerSample, "data", dataSize
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


class WavHeader(NamedTuple):
    file_size: int
    audio_format: int
    num_channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int


def build_header(data_size: int, sample_rate: int = DEFAULT_SAMPLE_RATE,
                 num_channels: int = 1, bits_per_sample: int = 16) -> bytes:
    bytes_per_sample = bits_per_sample // 8
    byte_rate = sample_rate * num_channels * bytes_per_sample
    block_align = num_channels * bytes_per_sample
    return _HEADER.pack(
        b"RIFF", 36 + data_size, b"WAVE",
        b"fmt ", 16, 1, num_channels, sample_rate, byte_rate, block_align, bits_per_sample,
        b"data", data_size,
    )


def pcm_to_wav(pcm: bytes, sample_rate: int = DEFAULT_SAMPLE_RATE,
               num_channels: int = 1, bits_per_sample: int = 16) -> bytes:
    """
    Wraps raw little-endian PCM samples in a 44-byte WAV header.

    Raises:
        ValueError: if the payload does not hold a whole number of sample frames.
    """
    frame_size = num_channels * (bits_per_sample // 8)
    if len(pcm) % frame_size:
        raise ValueError(f"PCM payload of {len(pcm)} bytes is not a multiple of the {frame_size}-byte frame size")
    return build_header(len(pcm), sample_rate, num_channels, bits_per_sample) + bytes(pcm)


def parse_wav_header(data: bytes) -> WavHeader:
    if len(data) < HEADER_SIZE:
        raise ValueError(f"WAV header needs {HEADER_SIZE} bytes, got {len(data)}")
    (riff, file_size, wave, fmt, fmt_size, audio_format, num_channels, sample_rate,
     byte_rate, block_align, bits_per_sample, data_tag, data_size) = _HEADER.unpack(data[:HEADER_SIZE])
    if riff != b"RIFF" or wave != b"WAVE" or fmt != b"fmt " or data_tag != b"data" or fmt_size != 16:
        raise ValueError("Not a minimal PCM WAV header")
    return WavHeader(file_size, audio_format, num_channels, sample_rate,
                     byte_rate, block_align, bits_per_sample, data_size)


def pcm_duration(num_bytes: int, sample_rate: int = DEFAULT_SAMPLE_RATE) -> float:
    # 16-bit mono
    return num_bytes / (sample_rate * 2)
