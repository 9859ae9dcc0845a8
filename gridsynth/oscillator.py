"""Wavetable oscillators: a generic one, the grid oscillator and the series oscillator."""

from __future__ import annotations

import math

import numpy as np

from gridsynth.waves import sine, wave_function

TWO_PI = 2.0 * math.pi
_RAMP_SECONDS = 0.05


class _SmoothedValue:
    """Linear ramp towards a target over a fixed number of steps."""

    def __init__(self, value):
        self.current = value
        self.target = value
        self._steps = 0
        self._countdown = 0
        self._step = 0.0

    def reset(self, sample_rate, ramp_seconds):
        self._steps = int(math.floor(ramp_seconds * sample_rate))
        self.set_current_and_target(self.target)

    def set_current_and_target(self, value):
        self.current = self.target = value
        self._countdown = 0

    def set_target(self, value):
        if value == self.target:
            return
        if self._steps <= 0:
            self.set_current_and_target(value)
            return
        self.target = value
        self._countdown = self._steps
        self._step = (self.target - self.current) / self._countdown

    def next_value(self):
        if self._countdown <= 0:
            return self.target
        self._countdown -= 1
        if self._countdown > 0:
            self.current += self._step
        else:
            self.current = self.target
        return self.current


class _LookupTable:
    """Linearly interpolated samples of a function over [minimum, maximum]."""

    def __init__(self, function, minimum, maximum, num_points):
        if num_points < 2:
            raise ValueError("a lookup table needs at least two points")
        span = maximum - minimum
        self._values = [
            function(minimum + span * i / (num_points - 1)) for i in range(num_points)
        ]
        self._values.append(self._values[-1])
        self._minimum = minimum
        self._maximum = maximum
        self._scaler = (num_points - 1) / span
        self._offset = -minimum * self._scaler

    def __call__(self, x):
        x = min(max(x, self._minimum), self._maximum)
        position = x * self._scaler + self._offset
        index = int(math.floor(position))
        fraction = position - index
        lower = self._values[index]
        upper = self._values[index + 1]
        return lower + fraction * (upper - lower)


class WavetableOscillator:
    """Phase-accumulating oscillator driven by a wave function of phase."""

    def __init__(self):
        self._generator = None
        self._frequency = _SmoothedValue(440.0)
        self.sample_rate = 48000.0
        self._phase = 0.0

    @property
    def frequency(self):
        """The target frequency in hertz."""
        return self._frequency.target

    @property
    def is_initialised(self):
        return self._generator is not None

    def initialise(self, function, lookup_size):
        """Use ``function``; with a non-zero ``lookup_size`` it is sampled into a table."""
        if lookup_size:
            self._generator = _LookupTable(function, -math.pi, math.pi, lookup_size)
        else:
            self._generator = function

    def set_frequency(self, hz):
        self._frequency.set_target(float(hz))

    def prepare(self, sample_rate, block_size, channels):
        self.sample_rate = float(sample_rate)
        self.reset()

    def reset(self):
        self._phase = 0.0
        if self.sample_rate > 0:
            self._frequency.reset(self.sample_rate, _RAMP_SECONDS)

    def _advance(self, increment):
        last = self._phase
        following = self._phase + increment
        while following >= TWO_PI:
            following -= TWO_PI
        self._phase = following
        return last

    def _next(self):
        if self._generator is None:
            raise RuntimeError("oscillator has no wave function")
        increment = TWO_PI * self._frequency.next_value() / self.sample_rate
        return self._generator(self._advance(increment) - math.pi)

    def process_sample(self, value):
        return value + self._next()

    def process(self, block):
        """Add the oscillator's output to every channel of ``block`` in place."""
        count = block.shape[-1]
        values = np.array([self._next() for _ in range(count)], dtype=float)
        block += values
        return block


class Oscillator(WavetableOscillator):
    """A grid oscillator with a selectable wave, detune and on/off switch."""

    def __init__(self):
        super().__init__()
        self.initialise(sine, 0)
        self.active = False
        self.detune_cents = 0.0
        self.fm_mod = 0.0
        self.fm_depth = 0.0

    def change_wave_type(self, wave_type):
        """Switch to the wave at ``wave_type``; unmapped indices leave it unchanged."""
        entry = wave_function(int(wave_type))
        if entry is not None:
            function, lookup_size = entry
            self.initialise(function, lookup_size)

    def set_detune_cents(self, cents):
        self.detune_cents = float(cents)

    def change_frequency(self, hz):
        ratio = 2.0 ** (self.detune_cents / 1200.0)
        self.set_frequency(hz * ratio + self.fm_mod)

    def update_fm(self, freq, depth):
        self.fm_depth = float(depth)

    def render(self, block):
        return self.process(block)


class CustomOscillator(WavetableOscillator):
    """Oscillator whose wave is a truncated cosine or sine series."""

    def __init__(self):
        super().__init__()
        self.pitch = 0.0
        self.active = False
        self.type_index = 0
        self.accuracy = 1
        self.mul_val = 1.0
        self.repeat_x = 1.0
        self.repeat_n = 1.0

    @staticmethod
    def _power(base, exponent):
        try:
            return math.pow(base, exponent)
        except ValueError:
            return math.nan

    def custom_function(self, x):
        """Sum of cos or sin(mul * x^repeat_x * i^repeat_n) for i up to accuracy, clamped."""
        if self.type_index == 0:
            term = math.cos
        elif self.type_index == 1:
            term = math.sin
        else:
            return 0.0
        x_power = self._power(x, self.repeat_x)
        total = sum(
            term(self.mul_val * x_power * self._power(i, self.repeat_n))
            for i in range(1, int(self.accuracy) + 1)
        )
        if total < -10.0:
            return -10.0
        if total > 10.0:
            return 10.0
        return total

    def change_function_type(self, type_index, accuracy, mul_val, repeat_x, repeat_n):
        self.type_index = int(type_index)
        self.accuracy = int(accuracy)
        self.mul_val = float(mul_val)
        self.repeat_x = float(repeat_x)
        self.repeat_n = float(repeat_n)
        self.initialise(self.custom_function, 128)

    def change_pitch(self, pitch):
        self.pitch = float(pitch)

    def change_frequency(self, frequency):
        ratio = 2.0 ** (self.pitch / 1200.0)
        self.set_frequency(frequency * ratio)

    def render(self, block):
        self.process(block)
        block *= 0.2
        return block