'''
errors raised while decoding a Standard MIDI File

Every failure carries the byte offset where it was detected so a bad file
can be inspected with a hex viewer.
'''
from typing import Any, Optional


class MidiDecodeError(ValueError):
    def __init__(self, message: str, offset: Optional[int] = None,
                 expected: Any = None, actual: Any = None):
        self.message = message
        self.offset = offset
        self.expected = expected
        self.actual = actual
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [self.message]
        if self.offset is not None:
            parts.append('at offset %d (0x%x)' % (self.offset, self.offset))
        if self.expected is not None or self.actual is not None:
            parts.append('expected %s, got %s' % (self.expected, self.actual))
        return ', '.join(parts)


class UnexpectedEndOfDataError(MidiDecodeError):
    pass


class MalformedHeaderError(MidiDecodeError):
    pass


class MalformedTrackError(MidiDecodeError):
    pass


class MissingRunningStatusError(MidiDecodeError):
    pass


class UnknownStatusByteError(MidiDecodeError):
    pass


class InvalidEndOfTrackError(MidiDecodeError):
    pass


class MalformedMetaEventError(MidiDecodeError):
    pass


class UnknownControlEventError(MidiDecodeError):
    pass
