import pytest

# official example files from the SMF 1.0 specification

FORMAT_0 = bytes([
    0x4D, 0x54, 0x68, 0x64, 0x00, 0x00, 0x00, 0x06,
    0x00, 0x00, 0x00, 0x01, 0x00, 0x60,

    0x4D, 0x54, 0x72, 0x6B, 0x00, 0x00, 0x00, 0x3B,
    0x00, 0xFF, 0x58, 0x04, 0x04, 0x02, 0x18, 0x08,
    0x00, 0xFF, 0x51, 0x03, 0x07, 0xA1, 0x20,
    0x00, 0xC0, 0x05,
    0x00, 0xC1, 0x2E,
    0x00, 0xC2, 0x46,
    0x00, 0x92, 0x30, 0x60,
    0x00, 0x3C, 0x60,
    0x60, 0x91, 0x43, 0x40,
    0x60, 0x90, 0x4C, 0x20,
    0x81, 0x40, 0x82, 0x30, 0x40,
    0x00, 0x3C, 0x40,
    0x00, 0x81, 0x43, 0x40,
    0x00, 0x80, 0x4C, 0x40,
    0x00, 0xFF, 0x2F, 0x00,
])

FORMAT_1 = bytes([
    0x4D, 0x54, 0x68, 0x64, 0x00, 0x00, 0x00, 0x06,
    0x00, 0x01, 0x00, 0x04, 0x00, 0x60,

    0x4D, 0x54, 0x72, 0x6B, 0x00, 0x00, 0x00, 0x14,
    0x00, 0xFF, 0x58, 0x04, 0x04, 0x02, 0x18, 0x08,
    0x00, 0xFF, 0x51, 0x03, 0x07, 0xA1, 0x20,
    0x83, 0x00, 0xFF, 0x2F, 0x00,

    0x4D, 0x54, 0x72, 0x6B, 0x00, 0x00, 0x00, 0x10,
    0x00, 0xC0, 0x05,
    0x81, 0x40, 0x90, 0x4C, 0x20,
    0x81, 0x40, 0x4C, 0x00,
    0x00, 0xFF, 0x2F, 0x00,

    0x4D, 0x54, 0x72, 0x6B, 0x00, 0x00, 0x00, 0x0F,
    0x00, 0xC1, 0x2E,
    0x60, 0x91, 0x43, 0x40,
    0x82, 0x20, 0x43, 0x00,
    0x00, 0xFF, 0x2F, 0x00,

    0x4D, 0x54, 0x72, 0x6B, 0x00, 0x00, 0x00, 0x15,
    0x00, 0xC2, 0x46,
    0x00, 0x92, 0x30, 0x60,
    0x00, 0x3C, 0x60,
    0x83, 0x00, 0x30, 0x00,
    0x00, 0x3C, 0x00,
    0x00, 0xFF, 0x2F, 0x00,
])

END_OF_TRACK = bytes([0x00, 0xFF, 0x2F, 0x00])


def header_chunk(fmt: int = 0, num_tracks: int = 1, division: int = 96) -> bytes:
    return (b'MThd' + (6).to_bytes(4, 'big') + fmt.to_bytes(2, 'big')
            + num_tracks.to_bytes(2, 'big') + division.to_bytes(2, 'big'))


def track_chunk(body: bytes, length: int = None) -> bytes:
    if length is None:
        length = len(body)
    return b'MTrk' + length.to_bytes(4, 'big') + body


def smf(*bodies: bytes, fmt: int = None, division: int = 96) -> bytes:
    '''A complete file with one track chunk per body.'''
    if fmt is None:
        fmt = 0 if len(bodies) == 1 else 1
    return header_chunk(fmt, len(bodies), division) + b''.join(
        track_chunk(body) for body in bodies)


@pytest.fixture
def format0_bytes() -> bytes:
    return FORMAT_0


@pytest.fixture
def format1_bytes() -> bytes:
    return FORMAT_1
