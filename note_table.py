'''
pandas views over the notes of a decoded MIDI file
'''
import pandas as pd

from midi_model import Midi

NOTE_COLUMNS = ['start', 'end', 'midi', 'vel', 'channel']


def note_frame(midi: Midi) -> pd.DataFrame:
    '''One row per sounded note, times in seconds, sorted by onset.'''
    notes = pd.DataFrame(midi.note_times(), columns=NOTE_COLUMNS)
    return notes.sort_values(['start', 'midi'], kind='stable').reset_index(drop=True)


def filter_timerange(timed_notes: pd.DataFrame, start: float, end: float) -> pd.DataFrame:
    # returns all notes that sound during start-end
    return timed_notes[(timed_notes.end > start) & (timed_notes.start < end)]


def get_onset_deltas(timed_notes: pd.DataFrame) -> pd.Series:
    '''Gaps between successive distinct onsets, chords collapsed.'''
    unique_onsets = pd.Series(timed_notes['start'].unique()).sort_values()
    onset_deltas = (unique_onsets - unique_onsets.shift())[1:]
    return onset_deltas[onset_deltas > 0.000001].reset_index(drop=True)
