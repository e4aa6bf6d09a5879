'''
typed model of a decoded Standard MIDI File

Every event shape is its own immutable NamedTuple; `Event` is the union of
all of them. Tracks and the Midi aggregate are NamedTuples too, so a decoded
file is a read-only value.
'''
from bisect import bisect_right
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

DEFAULT_TEMPO = 500000  # microseconds per quarter note, 120 bpm


class EventCategory(Enum):
    META = 'meta'
    CONTROL = 'control'
    SYSTEM_EXCLUSIVE = 'sysex'


class MessageType(Enum):
    # Channel Events:
    Note_Off = 0x8
    Note_On = 0x9
    Note_Aftertouch = 0xA
    Controller = 0xB
    Program = 0xC
    Channel_Aftertouch = 0xD
    Pitch = 0xE
    # Meta Events:
    Sequence_Num = 0x00
    Text_Event = 0x01
    Copyright = 0x02
    Track_Name = 0x03
    Instr_Name = 0x04
    Lyrics = 0x05
    Marker = 0x06
    Cue_Point = 0x07
    Midi_Channel_Prefix = 0x20
    End_Track = 0x2f
    Set_Tempo = 0x51
    SMPTE_Offset = 0x54
    Time_Sig = 0x58
    Key_Sig = 0x59
    Sequencer_Specific = 0x7f

    def is_meta(self) -> bool:
        return self not in CHANNEL_MESSAGES

    @staticmethod
    def meta(code: int) -> Optional['MessageType']:
        '''Meta type for `code`, None when the code is not a known meta type.'''
        for member in MessageType:
            if member.value == code and member.is_meta():
                return member
        return None

    @staticmethod
    def channel(family: int) -> Optional['MessageType']:
        for member in CHANNEL_MESSAGES:
            if member.value == family:
                return member
        return None


CHANNEL_MESSAGES = (
    MessageType.Note_Off,
    MessageType.Note_On,
    MessageType.Note_Aftertouch,
    MessageType.Controller,
    MessageType.Program,
    MessageType.Channel_Aftertouch,
    MessageType.Pitch)


# Meta Events:

class SequenceNumberEvent(NamedTuple):
    delta_time: int
    number: int

    category = EventCategory.META
    message_type = MessageType.Sequence_Num


class TextEvent(NamedTuple):
    delta_time: int
    text: str

    category = EventCategory.META
    message_type = MessageType.Text_Event


class CopyrightNoticeEvent(NamedTuple):
    delta_time: int
    text: str

    category = EventCategory.META
    message_type = MessageType.Copyright


class TrackNameEvent(NamedTuple):
    delta_time: int
    text: str

    category = EventCategory.META
    message_type = MessageType.Track_Name


class InstrumentNameEvent(NamedTuple):
    delta_time: int
    text: str

    category = EventCategory.META
    message_type = MessageType.Instr_Name


class LyricEvent(NamedTuple):
    delta_time: int
    text: str

    category = EventCategory.META
    message_type = MessageType.Lyrics


class MarkerEvent(NamedTuple):
    delta_time: int
    text: str

    category = EventCategory.META
    message_type = MessageType.Marker


class CuePointEvent(NamedTuple):
    delta_time: int
    text: str

    category = EventCategory.META
    message_type = MessageType.Cue_Point


class MidiChannelPrefixEvent(NamedTuple):
    delta_time: int
    channel: int

    category = EventCategory.META
    message_type = MessageType.Midi_Channel_Prefix


class SetTempoEvent(NamedTuple):
    delta_time: int
    tempo: int  # microseconds per quarter note

    category = EventCategory.META
    message_type = MessageType.Set_Tempo

    @property
    def bpm(self) -> float:
        return 60000000 / self.tempo


class SmpteOffsetEvent(NamedTuple):
    delta_time: int
    hour: int
    minute: int
    second: int
    frame: int
    subframe: int

    category = EventCategory.META
    message_type = MessageType.SMPTE_Offset


class TimeSignatureEvent(NamedTuple):
    delta_time: int
    numerator: int
    denominator: int  # already expanded from its power-of-two encoding
    clocks_per_tick: int
    notes_per_24_clocks: int

    category = EventCategory.META
    message_type = MessageType.Time_Sig


class KeySignatureEvent(NamedTuple):
    delta_time: int
    key: int    # sharps when positive, flats when negative
    scale: int  # 0 major, 1 minor

    category = EventCategory.META
    message_type = MessageType.Key_Sig


class SequencerSpecificEvent(NamedTuple):
    delta_time: int
    data: bytes

    category = EventCategory.META
    message_type = MessageType.Sequencer_Specific


class EndOfTrackEvent(NamedTuple):
    delta_time: int

    category = EventCategory.META
    message_type = MessageType.End_Track


class UnknownMetaEvent(NamedTuple):
    delta_time: int
    meta_type: int
    data: bytes

    category = EventCategory.META
    message_type = None


# Channel Events:

class NoteOffEvent(NamedTuple):
    delta_time: int
    channel: int
    note: int
    velocity: int

    category = EventCategory.CONTROL
    message_type = MessageType.Note_Off


class NoteOnEvent(NamedTuple):
    delta_time: int
    channel: int
    note: int
    velocity: int

    category = EventCategory.CONTROL
    message_type = MessageType.Note_On


class PolyphonicKeyPressureEvent(NamedTuple):
    delta_time: int
    channel: int
    note: int
    pressure: int

    category = EventCategory.CONTROL
    message_type = MessageType.Note_Aftertouch


class ControlChangeEvent(NamedTuple):
    delta_time: int
    channel: int
    controller: int
    value: int

    category = EventCategory.CONTROL
    message_type = MessageType.Controller


class ProgramChangeEvent(NamedTuple):
    delta_time: int
    channel: int
    program: int

    category = EventCategory.CONTROL
    message_type = MessageType.Program


class ChannelPressureEvent(NamedTuple):
    delta_time: int
    channel: int
    pressure: int

    category = EventCategory.CONTROL
    message_type = MessageType.Channel_Aftertouch


class PitchBendEvent(NamedTuple):
    delta_time: int
    channel: int
    bend: int  # 14 bit, 0x2000 is centered

    category = EventCategory.CONTROL
    message_type = MessageType.Pitch


class SysExEvent(NamedTuple):
    delta_time: int
    status: int  # 0xF0 or 0xF7
    data: bytes

    category = EventCategory.SYSTEM_EXCLUSIVE


TEXT_EVENTS = (
    TextEvent,
    CopyrightNoticeEvent,
    TrackNameEvent,
    InstrumentNameEvent,
    LyricEvent,
    MarkerEvent,
    CuePointEvent)

MetaEvent = Union[
    SequenceNumberEvent, TextEvent, CopyrightNoticeEvent, TrackNameEvent,
    InstrumentNameEvent, LyricEvent, MarkerEvent, CuePointEvent,
    MidiChannelPrefixEvent, SetTempoEvent, SmpteOffsetEvent,
    TimeSignatureEvent, KeySignatureEvent, SequencerSpecificEvent,
    EndOfTrackEvent, UnknownMetaEvent]

ControlEvent = Union[
    NoteOffEvent, NoteOnEvent, PolyphonicKeyPressureEvent, ControlChangeEvent,
    ProgramChangeEvent, ChannelPressureEvent, PitchBendEvent]

Event = Union[MetaEvent, ControlEvent, SysExEvent]


def status_byte(event: ControlEvent) -> int:
    '''Rebuilds the status byte a channel event was decoded from.'''
    return (event.message_type.value << 4) | (event.channel & 0x0f)


class Header(NamedTuple):
    signature: str
    length: int
    format: int
    num_tracks: int
    division: int

    @property
    def uses_smpte(self) -> bool:
        return bool(self.division & 0x8000)

    @property
    def ticks_per_beat(self) -> Optional[int]:
        return None if self.uses_smpte else self.division & 0x7fff

    @property
    def smpte_fps(self) -> Optional[int]:
        '''Frames per second of an SMPTE division (29 means 29.97 drop frame).'''
        if not self.uses_smpte:
            return None
        return 256 - (self.division >> 8)

    @property
    def ticks_per_frame(self) -> Optional[int]:
        return self.division & 0xff if self.uses_smpte else None


class Track(NamedTuple):
    signature: str
    length: int
    events: Tuple[Event, ...]

    @property
    def name(self) -> str:
        names = [evt.text for evt in self.events if isinstance(evt, TrackNameEvent)]
        return names[0] if len(names) == 1 else ''

    def abs_times(self) -> List[Tuple[int, Event]]:
        '''Pairs every event with its tick position from the track start.'''
        event_times = []
        t = 0
        for evt in self.events:
            t += evt.delta_time
            event_times.append((t, evt))
        return event_times


class Midi(NamedTuple):
    header: Header
    tracks: Tuple[Track, ...]

    def tempo_map(self) -> List[Tuple[int, int]]:
        tempo_events = [(0, DEFAULT_TEMPO)]
        for track in self.tracks:
            for tick, evt in track.abs_times():
                if isinstance(evt, SetTempoEvent):
                    tempo_events.append((tick, evt.tempo))
        # stable sort keeps a tempo set at tick 0 after the default
        return sorted(tempo_events, key=lambda x: x[0])

    def seconds_at(self, tick: int) -> float:
        return self._tick_converter()(tick)

    def _tick_converter(self):
        header = self.header
        if header.uses_smpte:
            ticks_per_second = header.smpte_fps * header.ticks_per_frame
            if header.smpte_fps == 29:
                ticks_per_second = 29.97 * header.ticks_per_frame
            return lambda tick: tick / ticks_per_second

        ticks_per_beat = header.ticks_per_beat
        changes = self.tempo_map()
        starts = [tick for tick, _ in changes]
        offsets = [0.0]
        for (tick, tempo), (next_tick, _) in zip(changes, changes[1:]):
            offsets.append(
                offsets[-1] + (next_tick - tick) * tempo / (ticks_per_beat * 1e6))

        def to_seconds(tick: int) -> float:
            i = bisect_right(starts, tick) - 1
            start, tempo = changes[i]
            return offsets[i] + (tick - start) * tempo / (ticks_per_beat * 1e6)
        return to_seconds

    def abs_times(self) -> List[Tuple[float, Event]]:
        '''Every event of every track with its time in seconds, in time order.

        All tracks share one tempo map, which is right for format 0 and 1.
        '''
        to_seconds = self._tick_converter()
        results: List[Tuple[float, Event]] = []
        for track in self.tracks:
            for tick, evt in track.abs_times():
                results.append((to_seconds(tick), evt))
        return sorted(results, key=lambda x: x[0])

    def note_times(self) -> List[Dict]:
        note_times = []
        on_notes: Dict[Tuple[int, int], Tuple[float, int]] = {}
        for time, evt in self.abs_times():
            if not isinstance(evt, (NoteOnEvent, NoteOffEvent)):
                continue
            key = (evt.channel, evt.note)
            if isinstance(evt, NoteOffEvent) or evt.velocity == 0:
                if key in on_notes:
                    start, vel = on_notes.pop(key)
                    note_times.append({
                        'start': start,
                        'end': time,
                        'midi': evt.note,
                        'vel': vel,
                        'channel': evt.channel
                    })
            else:
                on_notes[key] = (time, evt.velocity)
        return note_times
