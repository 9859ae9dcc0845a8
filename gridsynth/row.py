"""A row of three grid oscillators sharing an LFO, gain, envelope and filter."""

from __future__ import annotations

import numpy as np

from gridsynth.dsp import (
    Adsr,
    AdsrParameters,
    FilterType,
    Gain,
    StateVariableFilter,
    midi_note_to_hz,
)
from gridsynth.oscillator import Oscillator

_OSCILLATOR_LEVEL = 0.2
_MIN_CUTOFF = 20.0
_MAX_CUTOFF = 20000.0

_FILTER_CHOICES = {
    1: FilterType.LOWPASS,
    2: FilterType.HIGHPASS,
    3: FilterType.BANDPASS,
}


class OscillatorRow:
    """Three oscillators mixed, gained and optionally filtered; indices run 1..3."""

    def __init__(self):
        self.oscillators = [Oscillator() for _ in range(3)]
        self.filter = StateVariableFilter()
        self.filter.set_type(FilterType.LOWPASS)
        self.filter_active = False
        self.filter_resonance = 0.001
        self.filter_cutoff = 0.0
        self.lfo = Oscillator()
        self.lfo.active = True
        self.lfo_depth = 0.5
        self.lfo_frequency = 4.0
        self.base_frequency = 0.0
        self.adsr = Adsr()
        self.adsr_parameters = AdsrParameters(attack=0.0, decay=0.1, sustain=0.1, release=0.1)
        self.gain = Gain(1.0)

    def _oscillator(self, index):
        position = int(index)
        if not 1 <= position <= len(self.oscillators):
            raise IndexError(f"oscillator {index} is outside 1..{len(self.oscillators)}")
        return self.oscillators[position - 1]

    def prepare(self, sample_rate, block_size, channels):
        for osc in self.oscillators:
            osc.prepare(sample_rate, block_size, channels)
        if self.lfo.active:
            self.lfo.prepare(sample_rate, block_size, channels)
        self.adsr.set_sample_rate(sample_rate)
        self.gain.prepare(sample_rate, block_size, channels)
        self.filter.prepare(sample_rate, block_size, channels)
        self.filter.reset()

    def start_note(self, midi_note):
        self.base_frequency = midi_note_to_hz(midi_note)
        for osc in self.oscillators:
            if osc.active:
                osc.reset()
                osc.change_frequency(self.base_frequency)
        self.lfo.reset()
        self.lfo.change_frequency(self.lfo_frequency)
        self.adsr.reset()
        self.adsr.note_on()

    def note_off(self):
        self.adsr.note_off()

    def _modulated_sample(self, osc, lfo_value):
        osc.change_frequency(self.base_frequency * (1.0 + lfo_value * self.lfo_depth))
        return osc.process_sample(0.0) * _OSCILLATOR_LEVEL

    def _update_filter(self):
        modulated = self.adsr.next_sample() * self.filter_cutoff
        self.filter.set_cutoff_frequency(min(max(modulated, _MIN_CUTOFF), _MAX_CUTOFF))
        self.filter.set_resonance(self.filter_resonance)

    def render(self, block):
        """Add the row's output to a (channels, samples) block in place."""
        channels, count = block.shape
        row_block = np.zeros((channels, count))
        # The envelope runs over the still-empty row buffer; it only shapes the cutoff.
        self.adsr.apply_envelope(row_block, 0, count)
        lfo_block = np.zeros((1, count))
        self.lfo.process(lfo_block)
        for osc in self.oscillators:
            if not osc.active:
                continue
            row_block += np.array(
                [self._modulated_sample(osc, value) for value in lfo_block[0]], dtype=float
            )
        self._update_filter()
        self.gain.process(row_block)
        if self.filter_active:
            self.filter.process(row_block)
        block += row_block
        return block

    def change_detune_cents(self, index, cents):
        self._oscillator(index).set_detune_cents(cents)

    def change_oscillator_is_active(self, index, is_active):
        self._oscillator(index).active = bool(is_active)

    def change_oscillator_wave_form(self, index, wave_form):
        self._oscillator(index).change_wave_type(wave_form)

    def change_filter_cutoff(self, frequency):
        self.filter_cutoff = float(frequency)

    def change_filter_resonance(self, resonance):
        self.filter_resonance = float(resonance)

    def change_filter(self, index):
        """0 turns the filter off; 1, 2, 3 select low, high and band pass."""
        index = int(index)
        if index == 0:
            self.filter_active = False
        elif index in _FILTER_CHOICES:
            self.filter.set_type(_FILTER_CHOICES[index])
            self.filter_active = True

    def change_lfo_depth(self, depth):
        self.lfo_depth = float(depth)

    def change_lfo_frequency(self, frequency):
        self.lfo_frequency = float(frequency)

    def change_lfo_wave_type(self, index):
        self.lfo.change_wave_type(index)

    def _update_adsr(self):
        self.adsr.set_parameters(self.adsr_parameters)

    def change_gain_decibels(self, decibels):
        self.gain.set_gain_decibels(decibels)
        self._update_adsr()

    def change_adsr_attack(self, attack):
        self.adsr_parameters.attack = float(attack)
        self._update_adsr()

    def change_adsr_decay(self, decay):
        self.adsr_parameters.decay = float(decay)
        self._update_adsr()

    def change_adsr_sustain(self, sustain):
        self.adsr_parameters.sustain = float(sustain)
        self._update_adsr()

    def change_adsr_release(self, release):
        self.adsr_parameters.release = float(release)
        self._update_adsr()