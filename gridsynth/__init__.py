"""Polyphonic oscillator-grid synthesiser engine: waves, oscillators, rows, voices, effects and a parameter-driven processor."""

__version__ = "0.1.0"