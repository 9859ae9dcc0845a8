# gridsynth

A polyphonic synthesiser engine built on NumPy. Each voice has a 3×3 grid of
wavetable oscillators arranged in three rows. Every row has its own filter, ADSR
envelope, gain and LFO. A voice can also have an optional series oscillator. The
summed voice passes through a master envelope, gain, reverb and chorus. The
processor then applies a fixed -6 dB master gain and a soft clipper.

Audio blocks are NumPy arrays shaped `(channels, samples)` and are processed in place.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## Rendering notes

```python
import numpy as np
from gridsynth.processor import SynthProcessor, MidiEvent

synth = SynthProcessor()            # stereo; SynthProcessor(1) for mono
synth.prepare_to_play(44100.0, 512)

buffer = np.zeros((2, 512))
synth.process_block(buffer, [MidiEvent(position=0, note=60, velocity=0.8)])

buffer = np.zeros((2, 512))
synth.process_block(buffer, [MidiEvent(position=100, note=60, note_on=False)])
```

`MidiEvent` has the fields `position` (the sample offset in the block), `note`
(0–127), `velocity` (0–1), `note_on` and `channel` (1–16). A note-on with
velocity 0 counts as a note-off. Out-of-range values raise `ValueError`.

`SynthProcessor` holds 32 `SynthVoice`s in a `Synthesiser`. When every voice is busy,
the synthesiser steals one, and it spares the lowest and highest held notes where it
can. Only mono and stereo output are accepted (`is_buses_layout_supported`).

## Parameters and state

`SynthProcessor.state` is a `ParameterState` built from `create_layout()` in
`gridsynth.parameters`. At the start of every block the processor reads it and passes
any changed values to all voices.

```python
synth.state.set("OSC11WAVETYPE", "SAW")   # choices accept an index or a name
synth.state.set("OSC12ACTIVE", True)
synth.state.set("OSC1FILTERTYPE", "LOWPASS")
synth.state.set("OSC1CUTOFF", 1200.0)     # snapped to the parameter's step and range
synth.state.get("MASTERGAIN")             # -3.0 by default

data = synth.get_state()                  # UTF-8 XML bytes
synth.set_state(data)                     # True; False if the data cannot be read
```

The layout has four parameter types, each with a `snap(value)` method:
`FloatParameter`, `IntParameter`, `ChoiceParameter` and `BoolParameter`.
`ParameterState.set` stores the snapped value and returns it. Unknown ids raise
`KeyError`. `load_xml` resets every parameter that the XML does not contain to its
default.

## Building blocks

- `gridsynth.waves`: the wave functions of phase (`sine`, `square`, `sigmoid`,
  `saw`, `triangle`, `half_sine`, `double_sine`, `double_cos`, `white_noise`,
  `power_sine`, `sinc_wave`, `soft_square`, `poly_wave`, `hyperbolic_tan`), the
  `WaveType` enum, and `wave_function(index)`. That function returns a
  `(function, lookup_size)` pair, or `None` for an index that has no wave. For such
  an index `Oscillator.change_wave_type` leaves the oscillator unchanged.
- `gridsynth.dsp`: `Adsr` / `AdsrParameters`, `Gain`, `StateVariableFilter` with
  `FilterType`, and the helpers `midi_note_to_hz` and `decibels_to_gain`.
- `gridsynth.oscillator`: `WavetableOscillator`, `Oscillator` (wave choice, detune
  in cents, on/off) and `CustomOscillator`. The custom oscillator sums a cosine or
  sine series shaped by accuracy, a multiplier and the powers of x and n, and clamps
  the result to [-10, 10].
- `gridsynth.effects`: `Reverb` / `ReverbParameters`, `Chorus` and `soft_clip`.
- `gridsynth.row`: `OscillatorRow`, which holds three oscillators with a shared LFO,
  gain, envelope-driven filter cutoff and filter.
- `gridsynth.voice`: `SynthVoice` and `SynthSound`. Reverb settings sent to a voice
  take effect at its next note.
- `gridsynth.parameters`: the parameter types, `create_layout()` and
  `ParameterState`.
- `gridsynth.processor`: `MidiEvent`, `Synthesiser` and `SynthProcessor`.

## What it does not do

gridsynth is an engine only. It has no graphical editor, opens no audio or MIDI
devices, does not load as a plug-in in a host, and has no command-line program. You
feed it `MidiEvent`s and NumPy buffers, and you deliver the rendered audio wherever
you need it.

## Running the tests

```
pytest
```