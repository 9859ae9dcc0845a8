"""Envelope, gain and state-variable filter building blocks."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum, auto

import numpy as np

MINUS_INFINITY_DB = -100.0


def midi_note_to_hz(note):
    """Return the frequency in hertz of a MIDI note number (A4 = 440 Hz)."""
    return 440.0 * 2.0 ** ((note - 69) / 12.0)


def decibels_to_gain(decibels):
    """Convert decibels to a linear gain; anything at or below -100 dB is silence."""
    if decibels > MINUS_INFINITY_DB:
        return 10.0 ** (decibels * 0.05)
    return 0.0


@dataclass
class AdsrParameters:
    """Times in seconds for attack, decay and release, and the sustain level."""

    attack: float = 0.1
    decay: float = 0.1
    sustain: float = 1.0
    release: float = 0.1


class _Stage(Enum):
    IDLE = auto()
    ATTACK = auto()
    DECAY = auto()
    SUSTAIN = auto()
    RELEASE = auto()


class Adsr:
    """Linear attack-decay-sustain-release envelope generator."""

    def __init__(self, sample_rate=44100.0):
        self._sample_rate = float(sample_rate)
        self._params = AdsrParameters()
        self._stage = _Stage.IDLE
        self._value = 0.0
        self._attack_rate = 0.0
        self._decay_rate = 0.0
        self._release_rate = 0.0
        self._recalculate_rates()

    @property
    def parameters(self):
        return replace(self._params)

    @property
    def sample_rate(self):
        return self._sample_rate

    def set_sample_rate(self, sample_rate):
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        self._sample_rate = float(sample_rate)
        self._recalculate_rates()

    def set_parameters(self, parameters):
        self._params = replace(parameters)
        self._recalculate_rates()

    def _rate(self, distance, seconds):
        if seconds > 0.0:
            return distance / (seconds * self._sample_rate)
        return -1.0

    def _recalculate_rates(self):
        p = self._params
        self._attack_rate = self._rate(1.0, p.attack)
        self._decay_rate = self._rate(1.0 - p.sustain, p.decay)
        self._release_rate = self._rate(p.sustain, p.release)

        if (
            (self._stage is _Stage.ATTACK and self._attack_rate <= 0.0)
            or (
                self._stage is _Stage.DECAY
                and (self._decay_rate <= 0.0 or self._value <= p.sustain)
            )
            or (self._stage is _Stage.RELEASE and self._release_rate <= 0.0)
        ):
            self._advance_stage()

    def _advance_stage(self):
        if self._stage is _Stage.ATTACK:
            self._stage = _Stage.DECAY if self._decay_rate > 0.0 else _Stage.SUSTAIN
        elif self._stage is _Stage.DECAY:
            self._stage = _Stage.SUSTAIN
        elif self._stage is _Stage.RELEASE:
            self.reset()

    def reset(self):
        self._value = 0.0
        self._stage = _Stage.IDLE

    def note_on(self):
        if self._attack_rate > 0.0:
            self._stage = _Stage.ATTACK
        elif self._decay_rate > 0.0:
            self._value = 1.0
            self._stage = _Stage.DECAY
        else:
            self._value = self._params.sustain
            self._stage = _Stage.SUSTAIN

    def note_off(self):
        if self._stage is _Stage.IDLE:
            return
        if self._params.release > 0.0:
            self._release_rate = self._value / (self._params.release * self._sample_rate)
            self._stage = _Stage.RELEASE
        else:
            self.reset()

    def next_sample(self):
        """Advance the envelope by one sample and return its value."""
        stage = self._stage
        if stage is _Stage.IDLE:
            return 0.0
        if stage is _Stage.ATTACK:
            self._value += self._attack_rate
            if self._value >= 1.0:
                self._value = 1.0
                self._advance_stage()
        elif stage is _Stage.DECAY:
            self._value -= self._decay_rate
            if self._value <= self._params.sustain:
                self._value = self._params.sustain
                self._advance_stage()
        elif stage is _Stage.SUSTAIN:
            self._value = self._params.sustain
        elif stage is _Stage.RELEASE:
            self._value -= self._release_rate
            if self._value <= 0.0:
                self._advance_stage()
        return self._value

    def apply_envelope(self, buffer, start, count):
        """Multiply ``count`` samples of every channel from ``start`` by the envelope."""
        end = start + count
        if self._stage is _Stage.IDLE:
            buffer[..., start:end] = 0.0
            return buffer
        if self._stage is _Stage.SUSTAIN:
            buffer[..., start:end] *= self._params.sustain
            return buffer
        envelope = np.array([self.next_sample() for _ in range(count)], dtype=float)
        buffer[..., start:end] *= envelope
        return buffer

    def is_active(self):
        return self._stage is not _Stage.IDLE


class Gain:
    """A plain linear gain stage controlled in decibels."""

    def __init__(self, decibels=0.0):
        self.gain = decibels_to_gain(decibels)
        self.sample_rate = 0.0

    def set_gain_decibels(self, decibels):
        self.gain = decibels_to_gain(decibels)

    def prepare(self, sample_rate, block_size, channels):
        self.sample_rate = float(sample_rate)

    def process(self, block):
        block *= self.gain
        return block


class FilterType(Enum):
    LOWPASS = auto()
    BANDPASS = auto()
    HIGHPASS = auto()


class StateVariableFilter:
    """Topology-preserving state-variable filter with low, band and high outputs."""

    def __init__(self):
        self.filter_type = FilterType.LOWPASS
        self.cutoff = 1000.0
        self.resonance = 1.0 / math.sqrt(2.0)
        self.sample_rate = 44100.0
        self._s1 = []
        self._s2 = []
        self._update()

    def _update(self):
        self._g = math.tan(math.pi * self.cutoff / self.sample_rate)
        self._r2 = 1.0 / self.resonance
        self._h = 1.0 / (1.0 + self._r2 * self._g + self._g * self._g)

    def set_type(self, filter_type):
        self.filter_type = FilterType(filter_type)

    def set_cutoff_frequency(self, frequency):
        if not 0.0 < frequency < self.sample_rate * 0.5:
            raise ValueError("cutoff must lie between 0 and half the sample rate")
        self.cutoff = float(frequency)
        self._update()

    def set_resonance(self, resonance):
        if resonance <= 0.0:
            raise ValueError("resonance must be positive")
        self.resonance = float(resonance)
        self._update()

    def prepare(self, sample_rate, block_size, channels):
        self.sample_rate = float(sample_rate)
        self._s1 = [0.0] * channels
        self._s2 = [0.0] * channels
        self.reset()
        self._update()

    def reset(self):
        self._s1 = [0.0] * len(self._s1)
        self._s2 = [0.0] * len(self._s2)

    def process_sample(self, channel, value):
        g, h, r2 = self._g, self._h, self._r2
        s1 = self._s1[channel]
        s2 = self._s2[channel]
        high = h * (value - s1 * (r2 + g) - s2)
        band = high * g + s1
        self._s1[channel] = high * g + band
        low = band * g + s2
        self._s2[channel] = band * g + low
        if self.filter_type is FilterType.LOWPASS:
            return low
        if self.filter_type is FilterType.BANDPASS:
            return band
        return high

    def process(self, block):
        for channel, samples in enumerate(block):
            samples[:] = [self.process_sample(channel, float(v)) for v in samples]
        return block