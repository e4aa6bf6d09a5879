'''
dump a decoded MIDI file as JSON

usage: python midi_to_json.py song.mid [-o song.json] [-v]
'''
import argparse
import json
import logging
import re
import sys
from typing import Dict, List

from midi_errors import MidiDecodeError
from midi_model import Event, Midi, SysExEvent, TextEvent, Track
from parse_midi import read_midi_file

log = logging.getLogger(__name__)

TYPE_NAMES = {TextEvent: 'text', SysExEvent: 'sysex'}


def event_type_name(evt: Event) -> str:
    '''snake_case tag of an event class, e.g. SetTempoEvent -> set_tempo'''
    if type(evt) in TYPE_NAMES:
        return TYPE_NAMES[type(evt)]
    name = type(evt).__name__[:-len('Event')]
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def event_to_dict(evt: Event) -> Dict:
    out = {'type': event_type_name(evt)}
    for field, value in evt._asdict().items():
        out[field] = list(value) if isinstance(value, bytes) else value
    return out


def track_to_dict(track: Track) -> Dict:
    return {
        'signature': track.signature,
        'length': track.length,
        'name': track.name,
        'events': [event_to_dict(evt) for evt in track.events]
    }


def midi_to_dict(midi: Midi) -> Dict:
    return {
        'header': midi.header._asdict(),
        'tracks': [track_to_dict(track) for track in midi.tracks]
    }


def midi_to_json(midi: Midi, indent: int = 2) -> str:
    return json.dumps(midi_to_dict(midi), indent=indent)


def main(argv: List[str] = None) -> int:
    ap = argparse.ArgumentParser(description='Decode a Standard MIDI File to JSON.')
    ap.add_argument('midi_file')
    ap.add_argument('-o', '--output', help='write JSON here instead of stdout')
    ap.add_argument('-v', '--verbose', action='store_true')
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    try:
        midi = read_midi_file(args.midi_file)
    except (MidiDecodeError, OSError) as e:
        log.error('could not decode %s: %s', args.midi_file, e)
        return 1

    text = midi_to_json(midi)
    if args.output:
        with open(args.output, 'w') as f:
            f.write(text)
        log.info('wrote %s', args.output)
    else:
        print(text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
