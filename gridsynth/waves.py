"""Wave shapes for the oscillators, each a function of phase in [-pi, pi]."""

from __future__ import annotations

import math
import random
from enum import IntEnum


class WaveType(IntEnum):
    """Wave choices in the order the parameter list offers them."""

    SINE = 0
    SQUARE = 1
    SIGMOID = 2
    SAW = 3
    BITSAW = 4
    HALFSINE = 5
    TRIANGLE = 6
    DOUBLESINE = 7
    DOUBLECOSINE = 8
    WHITENOISE = 9
    POWERSINE = 10
    SINCWAVE = 11
    SOFTSQUARE = 12
    POLYWAVE = 13
    HYPERTAN = 14


def sine(x):
    return math.sin(x)


def square(x):
    return 1.0 if x < 0.0 else -1.0


def sigmoid(x):
    return 1.0 / (1.0 + math.exp(-x))


def saw(x):
    return (1.0 / math.pi) * (x - math.pi)


def triangle(x):
    return (2.0 / math.pi) * math.asin(math.sin(x))


def half_sine(x):
    return 2.0 * max(0.0, math.sin(x)) - 1.0


def double_sine(x):
    return math.sin(x) + math.sin(2 * x) / 2.0 + math.sin(3 * x) / 3.0


def double_cos(x):
    return math.cos(x) + math.cos(x**2 * 4.0) / 2.0 + math.cos(x**3 * 8.0) / 3.0


def white_noise(x):
    return random.random() * 0.25 - 0.125


def power_sine(x):
    s = math.sin(x)
    return s**3 if s >= 0.0 else -((-s) ** 3)


def sinc_wave(x):
    if abs(x) < 1e-6:
        return 1.0
    return math.sin(x) / x


def soft_square(x):
    return (2.0 / math.pi) * math.atan(math.tan(x * 0.5) * 5.0)


def poly_wave(x):
    y = x / math.pi
    return (4.0 / 3.0) * (y - y**3 / 3.0)


def hyperbolic_tan(x):
    return math.tanh(2.0 * math.sin(x))


# Index -> (function, lookup table size); a size of 0 means direct evaluation.
_WAVE_TABLE = {
    0: (sine, 128),
    1: (square, 0),
    2: (sigmoid, 128),
    3: (saw, 128),
    4: (saw, 8),
    5: (triangle, 128),
    6: (half_sine, 128),
    7: (double_sine, 128),
    8: (double_cos, 128),
    9: (white_noise, 128),
    10: (power_sine, 128),
    11: (sinc_wave, 128),
    12: (soft_square, 128),
    13: (poly_wave, 128),
    15: (hyperbolic_tan, 128),
}


def wave_function(index):
    """Return ``(function, lookup_size)`` for a wave index, or None if it has none."""
    return _WAVE_TABLE.get(int(index))