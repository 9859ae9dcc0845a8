import numpy as np
import pytest

from gridsynth.dsp import AdsrParameters, FilterType, decibels_to_gain, midi_note_to_hz
from gridsynth.oscillator import Oscillator
from gridsynth.row import OscillatorRow
from gridsynth.waves import WaveType


def make_row(active=(1,), note=69):
    row = OscillatorRow()
    row.prepare(44100.0, 64, 2)
    for index in active:
        row.change_oscillator_is_active(index, True)
    row.start_note(note)
    return row


def test_silent_row_adds_nothing():
    row = make_row(active=())
    block = np.zeros((2, 64))
    assert np.array_equal(row.render(block), np.zeros((2, 64)))


def test_active_row_makes_sound_on_all_channels():
    row = make_row()
    out = row.render(np.zeros((2, 64)))
    assert np.abs(out).max() > 0.0
    assert np.allclose(out[0], out[1])


def test_render_adds_onto_existing_content():
    base = make_row().render(np.zeros((2, 64)))
    added = make_row().render(np.ones((2, 64)))
    assert np.allclose(added - base, 1.0)


def test_gain_scales_output():
    loud = make_row()
    loud.change_gain_decibels(0.0)
    quiet = make_row()
    quiet.change_gain_decibels(-6.0)
    a = loud.render(np.zeros((2, 64)))
    b = quiet.render(np.zeros((2, 64)))
    assert np.allclose(b, a * decibels_to_gain(-6.0))


def test_square_wave_level():
    row = make_row()
    row.change_oscillator_wave_form(1, WaveType.SQUARE)
    out = row.render(np.zeros((2, 64)))
    assert np.allclose(np.abs(out), 0.2 * decibels_to_gain(1.0))


def test_lowpass_filter_reduces_energy():
    plain = make_row()
    plain.change_oscillator_wave_form(1, WaveType.SQUARE)
    filtered = make_row()
    filtered.change_oscillator_wave_form(1, WaveType.SQUARE)
    filtered.change_filter(1)
    a = plain.render(np.zeros((2, 256)))
    b = filtered.render(np.zeros((2, 256)))
    assert np.sqrt(np.mean(b**2)) < np.sqrt(np.mean(a**2))


def test_start_note_sets_base_frequency():
    row = make_row(note=60)
    assert row.base_frequency == pytest.approx(midi_note_to_hz(60))


def test_detune_of_an_octave_doubles_frequency():
    row = OscillatorRow()
    row.prepare(44100.0, 64, 2)
    row.change_oscillator_is_active(1, True)
    row.change_detune_cents(1, 1200.0)
    row.start_note(69)
    assert row.oscillators[0].frequency == pytest.approx(2 * midi_note_to_hz(69))


def test_inactive_oscillators_are_not_retuned():
    row = make_row(active=(1,), note=60)
    assert row.oscillators[1].frequency == Oscillator().frequency


def test_lfo_frequency_applied_on_start():
    row = OscillatorRow()
    row.prepare(44100.0, 64, 2)
    row.change_lfo_frequency(2.5)
    row.change_lfo_depth(0.25)
    row.start_note(64)
    assert row.lfo.frequency == pytest.approx(2.5)
    assert row.lfo_depth == 0.25


@pytest.mark.parametrize(
    "index,expected",
    [(1, FilterType.LOWPASS), (2, FilterType.HIGHPASS), (3, FilterType.BANDPASS)],
)
def test_change_filter_selects_type(index, expected):
    row = OscillatorRow()
    row.change_filter(index)
    assert row.filter_active is True
    assert row.filter.filter_type is expected


def test_change_filter_zero_turns_off_and_unknown_ignored():
    row = OscillatorRow()
    row.change_filter(2)
    row.change_filter(7)
    assert row.filter_active is True
    assert row.filter.filter_type is FilterType.HIGHPASS
    row.change_filter(0)
    assert row.filter_active is False


def test_adsr_changes_reach_envelope():
    row = OscillatorRow()
    assert row.adsr.parameters == AdsrParameters()
    row.change_adsr_decay(0.3)
    assert row.adsr.parameters == AdsrParameters(attack=0.0, decay=0.3, sustain=0.1, release=0.1)
    row.change_adsr_attack(0.2)
    row.change_adsr_sustain(0.6)
    row.change_adsr_release(0.4)
    assert row.adsr.parameters == AdsrParameters(attack=0.2, decay=0.3, sustain=0.6, release=0.4)


@pytest.mark.parametrize("index", [0, 4])
def test_oscillator_index_out_of_range(index):
    row = OscillatorRow()
    with pytest.raises(IndexError):
        row.change_detune_cents(index, 10.0)
    with pytest.raises(IndexError):
        row.change_oscillator_is_active(index, True)