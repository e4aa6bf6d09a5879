'''
sequential big-endian reader over an in-memory buffer
'''
from midi_errors import UnexpectedEndOfDataError


class ByteCursor:
    '''Reads integers, strings and raw bytes from `data` one after the other.

    The position is public and may be moved back, which is how the track
    decoder pushes back a data byte under running status.
    '''

    def __init__(self, data: bytes):
        self._data = memoryview(bytes(data))
        self._position = 0

    def __len__(self) -> int:
        return len(self._data)

    @property
    def position(self) -> int:
        return self._position

    @position.setter
    def position(self, value: int) -> None:
        if not 0 <= value <= len(self._data):
            raise ValueError(
                'position %d outside buffer of %d bytes' % (value, len(self._data)))
        self._position = value

    @property
    def remaining(self) -> int:
        return len(self._data) - self._position

    def at_end(self) -> bool:
        return self._position >= len(self._data)

    def read_bytes(self, size: int) -> bytes:
        if size < 0:
            raise ValueError('size must be non-negative, got %d' % size)
        if size > self.remaining:
            raise UnexpectedEndOfDataError(
                'read past end of buffer',
                offset=self._position,
                expected='%d byte(s)' % size,
                actual='%d byte(s) left' % self.remaining)
        start = self._position
        self._position += size
        return bytes(self._data[start:start + size])

    def read_uint(self, size: int) -> int:
        return int.from_bytes(self.read_bytes(size), byteorder='big')

    def read_uint8(self) -> int:
        return self.read_uint(1)

    def read_uint16(self) -> int:
        return self.read_uint(2)

    def read_uint24(self) -> int:
        return self.read_uint(3)

    def read_uint32(self) -> int:
        return self.read_uint(4)

    def read_string(self, size: int, encoding: str = 'ascii',
                    errors: str = 'replace') -> str:
        return self.read_bytes(size).decode(encoding, errors)
