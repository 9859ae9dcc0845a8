import math

import pytest

from gridsynth import waves
from gridsynth.waves import WaveType, wave_function


def test_square_sign():
    assert waves.square(-1.0) == 1.0
    assert waves.square(1.0) == -1.0
    assert waves.square(0.0) == -1.0


def test_sigmoid_midpoint():
    assert waves.sigmoid(0.0) == pytest.approx(0.5)
    assert waves.sigmoid(2.0) + waves.sigmoid(-2.0) == pytest.approx(1.0)


def test_saw_is_linear():
    assert waves.saw(0.0) == pytest.approx(-1.0)
    assert waves.saw(1.0) - waves.saw(0.5) == pytest.approx(waves.saw(0.5) - waves.saw(0.0))


def test_triangle_bounded():
    values = [waves.triangle(-math.pi + k * 0.1) for k in range(63)]
    assert all(-1.0 <= v <= 1.0 for v in values)
    assert waves.triangle(math.pi / 2) == pytest.approx(1.0)


def test_half_sine_floor():
    assert waves.half_sine(-math.pi / 2) == pytest.approx(-1.0)
    assert waves.half_sine(math.pi / 2) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "fn",
    [waves.sine, waves.double_sine, waves.power_sine, waves.hyperbolic_tan,
     waves.soft_square, waves.poly_wave],
)
def test_odd_functions(fn):
    for x in (0.3, 1.1, 2.5):
        assert fn(-x) == pytest.approx(-fn(x))


def test_double_cos_even():
    for x in (0.4, 1.7):
        assert waves.double_cos(-x) == pytest.approx(waves.double_cos(x))


def test_sinc_at_origin():
    assert waves.sinc_wave(0.0) == 1.0
    assert waves.sinc_wave(1e-7) == 1.0
    assert waves.sinc_wave(2.0) == pytest.approx(math.sin(2.0) / 2.0)


def test_white_noise_range():
    values = [waves.white_noise(0.0) for _ in range(500)]
    assert all(-0.125 <= v < 0.125 for v in values)
    assert len(set(values)) > 1


def test_wave_type_order_selects_functions():
    assert len(WaveType) == 15
    assert wave_function(WaveType.SINE) == (waves.sine, 128)
    assert wave_function(WaveType.SAW) == (waves.saw, 128)
    assert wave_function(WaveType.HYPERTAN) is None


def test_wave_function_table():
    assert wave_function(0) == (waves.sine, 128)
    assert wave_function(1) == (waves.square, 0)
    assert wave_function(4) == (waves.saw, 8)
    assert wave_function(5)[0] is waves.triangle
    assert wave_function(6)[0] is waves.half_sine
    assert wave_function(15)[0] is waves.hyperbolic_tan


def test_wave_function_unmapped():
    assert wave_function(14) is None
    assert wave_function(99) is None


def test_wave_function_truncates_float_index():
    assert wave_function(3.7) == wave_function(3)