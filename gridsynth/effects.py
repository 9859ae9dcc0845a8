"""Master effects: a Freeverb-style reverb, a modulated-delay chorus and a soft clipper."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import numpy as np

TWO_PI = 2.0 * math.pi

_COMB_TUNINGS = (1116, 1188, 1277, 1356, 1422, 1491, 1557, 1617)
_ALLPASS_TUNINGS = (556, 441, 341, 225)
_STEREO_SPREAD = 23
_REFERENCE_RATE = 44100.0

_WET_SCALE = 3.0
_DRY_SCALE = 2.0
_ROOM_SCALE = 0.28
_ROOM_OFFSET = 0.7
_DAMP_SCALE = 0.4
_INPUT_GAIN = 0.015

_MAX_CENTRE_DELAY_MS = 100.0
_MAX_DEPTH_MS = 1.0
_OSC_VOLUME = 0.5


def soft_clip(x):
    """Gentle saturation 0.5 * (x + tanh x), limited to [-1, 1]."""
    result = np.clip(0.5 * (np.asarray(x, dtype=float) + np.tanh(x)), -1.0, 1.0)
    if np.ndim(result) == 0:
        return float(result)
    return result


@dataclass
class ReverbParameters:
    """Reverb settings, each in 0..1; a freeze mode of 0.5 or more holds the tail."""

    room_size: float = 0.5
    damping: float = 0.5
    wet_level: float = 0.33
    dry_level: float = 0.4
    width: float = 1.0
    freeze_mode: float = 0.0


class _CombFilter:
    def __init__(self, size):
        self._buffer = [0.0] * size
        self._index = 0
        self._last = 0.0

    def clear(self):
        self._buffer = [0.0] * len(self._buffer)
        self._index = 0
        self._last = 0.0

    def process(self, value, damp, feedback):
        output = self._buffer[self._index]
        self._last = output * (1.0 - damp) + self._last * damp
        self._buffer[self._index] = value + self._last * feedback
        self._index = (self._index + 1) % len(self._buffer)
        return output


class _AllPassFilter:
    def __init__(self, size):
        self._buffer = [0.0] * size
        self._index = 0

    def clear(self):
        self._buffer = [0.0] * len(self._buffer)
        self._index = 0

    def process(self, value):
        buffered = self._buffer[self._index]
        self._buffer[self._index] = value + buffered * 0.5
        self._index = (self._index + 1) % len(self._buffer)
        return buffered - value


class Reverb:
    """Eight parallel combs into four series all-passes per channel, mono or stereo."""

    def __init__(self):
        self.enabled = True
        self.sample_rate = _REFERENCE_RATE
        self._parameters = ReverbParameters()
        self._build()
        self._update()

    @property
    def parameters(self):
        return replace(self._parameters)

    def set_parameters(self, parameters):
        self._parameters = replace(parameters)
        self._update()

    def prepare(self, sample_rate, block_size, channels):
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        self.sample_rate = float(sample_rate)
        self._build()
        self._update()

    def reset(self):
        for filters in (*self._combs, *self._allpasses):
            for item in filters:
                item.clear()

    def _build(self):
        scale = self.sample_rate / _REFERENCE_RATE

        def length(tuning, channel):
            return max(1, int((tuning + _STEREO_SPREAD * channel) * scale))

        self._combs = [
            [_CombFilter(length(t, channel)) for t in _COMB_TUNINGS] for channel in range(2)
        ]
        self._allpasses = [
            [_AllPassFilter(length(t, channel)) for t in _ALLPASS_TUNINGS]
            for channel in range(2)
        ]

    def _update(self):
        p = self._parameters
        wet = p.wet_level * _WET_SCALE
        self._dry = p.dry_level * _DRY_SCALE
        self._wet1 = 0.5 * wet * (1.0 + p.width)
        self._wet2 = 0.5 * wet * (1.0 - p.width)
        frozen = p.freeze_mode >= 0.5
        self._input_gain = 0.0 if frozen else _INPUT_GAIN
        if frozen:
            self._damp, self._feedback = 0.0, 1.0
        else:
            self._damp = p.damping * _DAMP_SCALE
            self._feedback = p.room_size * _ROOM_SCALE + _ROOM_OFFSET

    def _wet_channel(self, channel, value):
        out = sum(c.process(value, self._damp, self._feedback) for c in self._combs[channel])
        for allpass in self._allpasses[channel]:
            out = allpass.process(out)
        return out

    def _process_mono(self, sample):
        out = self._wet_channel(0, sample * self._input_gain)
        return out * self._wet1 + sample * self._dry

    def _process_stereo(self, left, right):
        value = (left + right) * self._input_gain
        out_left = self._wet_channel(0, value)
        out_right = self._wet_channel(1, value)
        return (
            out_left * self._wet1 + out_right * self._wet2 + left * self._dry,
            out_right * self._wet1 + out_left * self._wet2 + right * self._dry,
        )

    def process(self, block):
        """Apply the reverb in place to a (channels, samples) block of one or two channels."""
        if not self.enabled:
            return block
        channels = block.shape[0]
        if channels == 1:
            block[0] = [self._process_mono(v) for v in block[0].tolist()]
        elif channels == 2:
            frames = [
                self._process_stereo(left, right)
                for left, right in zip(block[0].tolist(), block[1].tolist())
            ]
            if frames:
                block[0], block[1] = zip(*frames)
        else:
            raise ValueError("reverb handles one or two channels only")
        return block


class Chorus:
    """Sine-modulated delay line with feedback and a linear dry/wet mix."""

    def __init__(self):
        self.rate = 1.0
        self.depth = 0.25
        self.centre_delay = 7.0
        self.feedback = 0.0
        self.mix = 0.5
        self.sample_rate = _REFERENCE_RATE
        self._channels = 2
        self._allocate()

    def set_rate(self, rate):
        if not 0.0 <= rate < 100.0:
            raise ValueError("chorus rate must lie in [0, 100) Hz")
        self.rate = float(rate)

    def set_depth(self, depth):
        if not 0.0 <= depth <= 1.0:
            raise ValueError("chorus depth must lie in [0, 1]")
        self.depth = float(depth)

    def set_centre_delay(self, delay_ms):
        if delay_ms < 0.0:
            raise ValueError("chorus delay cannot be negative")
        self.centre_delay = min(max(float(delay_ms), 1.0), _MAX_CENTRE_DELAY_MS)

    def set_feedback(self, feedback):
        if not -1.0 <= feedback <= 1.0:
            raise ValueError("chorus feedback must lie in [-1, 1]")
        self.feedback = float(feedback)

    def set_mix(self, mix):
        if not 0.0 <= mix <= 1.0:
            raise ValueError("chorus mix must lie in [0, 1]")
        self.mix = float(mix)

    def prepare(self, sample_rate, block_size, channels):
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        self.sample_rate = float(sample_rate)
        self._channels = int(channels)
        self._allocate()

    def _allocate(self):
        size = int(
            math.ceil(self.sample_rate * (_MAX_CENTRE_DELAY_MS + _MAX_DEPTH_MS) / 1000.0)
        ) + 2
        self._lines = np.zeros((self._channels, size))
        self.reset()

    def reset(self):
        self._lines[:] = 0.0
        self._write = 0
        self._last = [0.0] * self._channels
        self._phase = 0.0

    def _read(self, line, delay):
        position = self._write - delay
        base = math.floor(position)
        fraction = position - base
        size = line.shape[0]
        lower = line[base % size]
        upper = line[(base + 1) % size]
        return lower + fraction * (upper - lower)

    def process(self, block):
        """Apply the chorus in place to a (channels, samples) block."""
        channels = block.shape[0]
        if channels > self._channels:
            raise ValueError("block has more channels than the chorus was prepared for")
        dry = block.copy()
        wet = np.empty_like(dry)
        size = self._lines.shape[1]
        increment = TWO_PI * self.rate / self.sample_rate
        for i, frame in enumerate(dry.T):
            modulation = _MAX_DEPTH_MS * self.depth * _OSC_VOLUME * math.sin(self._phase)
            self._phase = (self._phase + increment) % TWO_PI
            delay = max(1.0, modulation + self.centre_delay) * self.sample_rate / 1000.0
            for channel, value in enumerate(frame):
                line = self._lines[channel]
                line[self._write] = value + self._last[channel] * self.feedback
                out = self._read(line, delay)
                self._last[channel] = out
                wet[channel, i] = out
            self._write = (self._write + 1) % size
        block[:] = dry * (1.0 - self.mix) + wet * self.mix
        return block