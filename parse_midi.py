'''
Standard MIDI File decoder

bytes -> Header -> Tracks (running status state machine) -> Midi
'''
import logging
from typing import Callable, Dict, List, Optional, Union
from os import PathLike

from byte_cursor import ByteCursor
from midi_config import DecoderConfig
from midi_errors import (
    InvalidEndOfTrackError, MalformedHeaderError, MalformedMetaEventError,
    MalformedTrackError, MissingRunningStatusError, UnknownControlEventError,
    UnknownStatusByteError)
from midi_model import (
    ChannelPressureEvent, ControlChangeEvent, ControlEvent,
    CopyrightNoticeEvent, CuePointEvent, EndOfTrackEvent, Event, Header,
    InstrumentNameEvent, KeySignatureEvent, LyricEvent, MarkerEvent,
    MessageType, MetaEvent, Midi, MidiChannelPrefixEvent, NoteOffEvent,
    NoteOnEvent, PitchBendEvent, PolyphonicKeyPressureEvent,
    ProgramChangeEvent, SequenceNumberEvent, SequencerSpecificEvent,
    SetTempoEvent, SmpteOffsetEvent, SysExEvent, TextEvent,
    TimeSignatureEvent, Track, TrackNameEvent, UnknownMetaEvent)

log = logging.getLogger(__name__)

HEADER_SIGNATURE = 'MThd'
TRACK_SIGNATURE = 'MTrk'

META_STATUS = 0xff
SYSEX_STATUSES = (0xf0, 0xf7)


def read_variable_int(cursor: ByteCursor) -> int:
    value = 0
    while True:
        byte = cursor.read_uint8()
        value = (value << 7) | (byte & 0x7f)
        if not byte & 0x80:
            return value


def read_header(cursor: ByteCursor) -> Header:
    start = cursor.position
    signature = cursor.read_string(4, 'ascii')
    if signature != HEADER_SIGNATURE:
        raise MalformedHeaderError(
            'bad header chunk signature', offset=start,
            expected=repr(HEADER_SIGNATURE), actual=repr(signature))

    header = Header(
        signature,
        cursor.read_uint32(),
        cursor.read_uint16(),
        cursor.read_uint16(),
        cursor.read_uint16())

    if header.format == 0 and header.num_tracks != 1:
        raise MalformedHeaderError(
            'format 0 file must hold exactly one track', offset=start + 10,
            expected=1, actual=header.num_tracks)
    if header.format in (1, 2) and header.num_tracks < 1:
        raise MalformedHeaderError(
            'format %d file must hold at least one track' % header.format,
            offset=start + 10, expected='>= 1', actual=header.num_tracks)
    if header.format not in (0, 1, 2):
        raise MalformedHeaderError(
            'unsupported file format', offset=start + 8,
            expected='0, 1 or 2', actual=header.format)

    log.debug('header: format %d, %d track(s), division 0x%04x',
              header.format, header.num_tracks, header.division)
    return header


# Meta Events:

def _payload_size(size: int) -> Callable:
    '''Marks a meta payload reader with the bytes its layout needs.'''
    def wrap(func):
        func.payload_size = size
        return func
    return wrap


@_payload_size(2)
def _sequence_number(dtime: int, data: bytes, config: DecoderConfig) -> MetaEvent:
    return SequenceNumberEvent(dtime, int.from_bytes(data[:2], byteorder='big'))


@_payload_size(1)
def _channel_prefix(dtime: int, data: bytes, config: DecoderConfig) -> MetaEvent:
    return MidiChannelPrefixEvent(dtime, data[0])


@_payload_size(3)
def _set_tempo(dtime: int, data: bytes, config: DecoderConfig) -> MetaEvent:
    return SetTempoEvent(dtime, int.from_bytes(data[:3], byteorder='big'))


@_payload_size(5)
def _smpte_offset(dtime: int, data: bytes, config: DecoderConfig) -> MetaEvent:
    return SmpteOffsetEvent(dtime, data[0], data[1], data[2], data[3], data[4])


@_payload_size(4)
def _time_signature(dtime: int, data: bytes, config: DecoderConfig) -> MetaEvent:
    return TimeSignatureEvent(dtime, data[0], 2 ** data[1], data[2], data[3])


@_payload_size(2)
def _key_signature(dtime: int, data: bytes, config: DecoderConfig) -> MetaEvent:
    key = int.from_bytes(data[:1], byteorder='big', signed=True)
    return KeySignatureEvent(dtime, key, data[1])


@_payload_size(0)
def _sequencer_specific(dtime: int, data: bytes, config: DecoderConfig) -> MetaEvent:
    return SequencerSpecificEvent(dtime, data)


def _text(event_class) -> Callable:
    @_payload_size(0)
    def read(dtime: int, data: bytes, config: DecoderConfig) -> MetaEvent:
        return event_class(dtime, data.decode(config.text_encoding, config.text_errors))
    return read


META_READERS: Dict[MessageType, Callable] = {
    MessageType.Sequence_Num: _sequence_number,
    MessageType.Text_Event: _text(TextEvent),
    MessageType.Copyright: _text(CopyrightNoticeEvent),
    MessageType.Track_Name: _text(TrackNameEvent),
    MessageType.Instr_Name: _text(InstrumentNameEvent),
    MessageType.Lyrics: _text(LyricEvent),
    MessageType.Marker: _text(MarkerEvent),
    MessageType.Cue_Point: _text(CuePointEvent),
    MessageType.Midi_Channel_Prefix: _channel_prefix,
    MessageType.Set_Tempo: _set_tempo,
    MessageType.SMPTE_Offset: _smpte_offset,
    MessageType.Time_Sig: _time_signature,
    MessageType.Key_Sig: _key_signature,
    MessageType.Sequencer_Specific: _sequencer_specific,
}


def read_meta_event(cursor: ByteCursor, meta_type: int, dtime: int,
                    config: Optional[DecoderConfig] = None) -> MetaEvent:
    '''Decodes a meta event whose 0xFF and type byte were already consumed.

    The declared length is always consumed in full, so an unknown or
    oversized meta event never shifts the events that follow it.
    '''
    config = config or DecoderConfig()
    length_offset = cursor.position
    msg_len = read_variable_int(cursor)
    status = MessageType.meta(meta_type)

    if status == MessageType.End_Track:
        if msg_len != 0:
            raise InvalidEndOfTrackError(
                'end of track must not carry data', offset=length_offset,
                expected=0, actual=msg_len)
        return EndOfTrackEvent(dtime)

    data = cursor.read_bytes(msg_len)

    if status is None:
        log.warning('unknown meta event type 0x%02x (%d byte(s)) at offset %d, '
                    'keeping raw data', meta_type, msg_len, length_offset)
        return UnknownMetaEvent(dtime, meta_type, data)

    reader = META_READERS[status]
    if msg_len < reader.payload_size:
        raise MalformedMetaEventError(
            '%s payload too short' % status.name, offset=length_offset,
            expected='%d byte(s)' % reader.payload_size,
            actual='%d byte(s)' % msg_len)
    return reader(dtime, data, config)


# Channel Events:

def read_control_event(cursor: ByteCursor, status: int, dtime: int) -> ControlEvent:
    '''Decodes the data bytes of a channel event with the given status byte.'''
    channel = status & 0x0f
    event_type = MessageType.channel(status >> 4)

    if event_type == MessageType.Note_Off:
        return NoteOffEvent(
            dtime, channel, cursor.read_uint8() & 0x7f, cursor.read_uint8() & 0x7f)
    if event_type == MessageType.Note_On:
        return NoteOnEvent(
            dtime, channel, cursor.read_uint8() & 0x7f, cursor.read_uint8() & 0x7f)
    if event_type == MessageType.Note_Aftertouch:
        return PolyphonicKeyPressureEvent(
            dtime, channel, cursor.read_uint8(), cursor.read_uint8())
    if event_type == MessageType.Controller:
        return ControlChangeEvent(
            dtime, channel, cursor.read_uint8(), cursor.read_uint8())
    if event_type == MessageType.Program:
        return ProgramChangeEvent(dtime, channel, cursor.read_uint8())
    if event_type == MessageType.Channel_Aftertouch:
        return ChannelPressureEvent(dtime, channel, cursor.read_uint8())
    if event_type == MessageType.Pitch:
        lsb = cursor.read_uint8() & 0x7f
        msb = cursor.read_uint8() & 0x7f
        return PitchBendEvent(dtime, channel, (msb << 7) | lsb)

    raise UnknownControlEventError(
        'unknown channel event family', offset=cursor.position,
        expected='0x8 to 0xE', actual='0x%x' % (status >> 4))


def read_sysex_event(cursor: ByteCursor, status: int, dtime: int) -> SysExEvent:
    msg_len = read_variable_int(cursor)
    log.debug('sysex 0x%02x block of %d byte(s) at offset %d',
              status, msg_len, cursor.position)
    return SysExEvent(dtime, status, cursor.read_bytes(msg_len))


def read_track(cursor: ByteCursor, config: Optional[DecoderConfig] = None) -> Track:
    config = config or DecoderConfig()
    chunk_start = cursor.position
    signature = cursor.read_string(4, 'ascii')
    if signature != TRACK_SIGNATURE:
        raise MalformedTrackError(
            'bad track chunk signature', offset=chunk_start,
            expected=repr(TRACK_SIGNATURE), actual=repr(signature))
    chunk_len = cursor.read_uint32()
    if chunk_len == 0:
        raise MalformedTrackError(
            'empty track chunk', offset=chunk_start + 4,
            expected='> 0', actual=chunk_len)

    end = cursor.position + chunk_len
    events: List[Event] = []
    running_status: Optional[int] = None

    while cursor.position < end:
        dtime = read_variable_int(cursor)
        status_offset = cursor.position
        status = cursor.read_uint8()

        if status < 0x80:
            if running_status is None:
                raise MissingRunningStatusError(
                    'data byte without a running status', offset=status_offset,
                    expected='status byte >= 0x80', actual='0x%02x' % status)
            cursor.position = status_offset
            status = running_status

        if status == META_STATUS:
            event = read_meta_event(cursor, cursor.read_uint8(), dtime, config)
            events.append(event)
            if isinstance(event, EndOfTrackEvent):
                break
            if config.reset_running_status_after_meta:
                running_status = None
        elif status in SYSEX_STATUSES:
            events.append(read_sysex_event(cursor, status, dtime))
            running_status = None
        elif 0x80 <= status < 0xf0:
            running_status = status
            events.append(read_control_event(cursor, status, dtime))
        else:
            raise UnknownStatusByteError(
                'unknown status byte', offset=status_offset,
                expected='channel, meta or sysex status', actual='0x%02x' % status)

    if not events:
        raise MalformedTrackError(
            'track holds no events', offset=chunk_start, expected='>= 1 event', actual=0)
    if not isinstance(events[-1], EndOfTrackEvent):
        log.warning('track at offset %d ended without an end of track event',
                    chunk_start)

    log.debug('track at offset %d: %d event(s)', chunk_start, len(events))
    return Track(signature, chunk_len, tuple(events))


def read_midi(data: bytes, config: Optional[DecoderConfig] = None) -> Midi:
    config = config or DecoderConfig()
    cursor = ByteCursor(data)
    header = read_header(cursor)
    tracks = [read_track(cursor, config) for _ in range(header.num_tracks)]
    return Midi(header, tuple(tracks))


def read_midi_file(path: Union[str, PathLike],
                   config: Optional[DecoderConfig] = None) -> Midi:
    with open(path, 'rb') as f:
        data = f.read()
    log.info('decoding %s (%d bytes)', path, len(data))
    return read_midi(data, config)
