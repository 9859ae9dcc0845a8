"""The synth's automatable parameters, their legal values and a saveable state."""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from gridsynth.waves import WaveType

STATE_TAG = "Parameters"
PARAM_TAG = "PARAM"

WAVE_CHOICES = tuple(wave.name for wave in WaveType)
FILTER_CHOICES = ("NONE", "LOWPASS", "HIGHPASS", "BANDPASS")
CUSTOM_FUNCTION_CHOICES = ("COSINE", "SINE")


def _round_half_up(value):
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class FloatParameter:
    """A continuous value in [minimum, maximum], snapped to multiples of ``interval``."""

    param_id: str
    name: str
    minimum: float
    maximum: float
    interval: float
    default: float

    def __post_init__(self):
        if not self.minimum < self.maximum:
            raise ValueError(f"{self.param_id}: minimum must be below maximum")
        if self.interval < 0:
            raise ValueError(f"{self.param_id}: interval cannot be negative")

    def snap(self, value):
        value = float(value)
        if self.interval > 0:
            steps = _round_half_up((value - self.minimum) / self.interval)
            value = self.minimum + self.interval * steps
        return min(max(value, self.minimum), self.maximum)


@dataclass(frozen=True)
class IntParameter:
    """A whole number in [minimum, maximum]."""

    param_id: str
    name: str
    minimum: int
    maximum: int
    default: int

    def __post_init__(self):
        if not self.minimum < self.maximum:
            raise ValueError(f"{self.param_id}: minimum must be below maximum")

    def snap(self, value):
        return int(min(max(_round_half_up(float(value)), self.minimum), self.maximum))


@dataclass(frozen=True)
class ChoiceParameter:
    """An index into a fixed list of named choices."""

    param_id: str
    name: str
    choices: tuple
    default: int

    def __post_init__(self):
        if not self.choices:
            raise ValueError(f"{self.param_id}: a choice parameter needs choices")
        object.__setattr__(self, "choices", tuple(self.choices))

    def snap(self, value):
        """Return the index for ``value``, which may be an index or a choice name."""
        if isinstance(value, str):
            try:
                return self.choices.index(value)
            except ValueError:
                raise ValueError(f"{self.param_id}: unknown choice {value!r}") from None
        last = len(self.choices) - 1
        return int(min(max(_round_half_up(float(value)), 0), last))


@dataclass(frozen=True)
class BoolParameter:
    """An on/off switch; numeric values of 0.5 or more count as on."""

    param_id: str
    name: str
    default: bool

    def snap(self, value):
        return float(value) >= 0.5


class ParameterState:
    """Current values of a parameter layout, with XML save and restore."""

    def __init__(self, layout=None):
        parameters = list(create_layout() if layout is None else layout)
        self._parameters = {}
        for parameter in parameters:
            if parameter.param_id in self._parameters:
                raise ValueError(f"duplicate parameter id {parameter.param_id!r}")
            self._parameters[parameter.param_id] = parameter
        self._values = {
            pid: parameter.snap(parameter.default)
            for pid, parameter in self._parameters.items()
        }

    def __contains__(self, param_id):
        return param_id in self._parameters

    def __iter__(self):
        return iter(self._parameters)

    def __len__(self):
        return len(self._parameters)

    def parameter(self, param_id):
        """Return the definition of ``param_id``."""
        try:
            return self._parameters[param_id]
        except KeyError:
            raise KeyError(f"unknown parameter {param_id!r}") from None

    def get(self, param_id):
        self.parameter(param_id)
        return self._values[param_id]

    def set(self, param_id, value):
        """Store ``value`` made legal for the parameter and return what was stored."""
        snapped = self.parameter(param_id).snap(value)
        self._values[param_id] = snapped
        return snapped

    def to_xml(self):
        """Serialise every value as UTF-8 XML bytes."""
        root = ET.Element(STATE_TAG)
        for pid, value in self._values.items():
            ET.SubElement(root, PARAM_TAG, id=pid, value=repr(float(value)))
        return ET.tostring(root, encoding="utf-8")

    def load_xml(self, data):
        """Replace the state from XML; parameters absent from it revert to defaults."""
        try:
            root = ET.fromstring(data)
        except ET.ParseError as error:
            raise ValueError(f"malformed parameter state: {error}") from None
        if root.tag != STATE_TAG:
            raise ValueError(f"expected a <{STATE_TAG}> element, found <{root.tag}>")
        stored = {}
        for element in root.iter(PARAM_TAG):
            pid = element.get("id")
            raw = element.get("value")
            if pid in self._parameters and raw is not None:
                try:
                    stored[pid] = float(raw)
                except ValueError:
                    continue
        for pid, parameter in self._parameters.items():
            self._values[pid] = parameter.snap(stored.get(pid, parameter.default))


def _grid():
    return [(x, y) for x in range(1, 4) for y in range(1, 4)]


def create_layout():
    """Return every parameter of the synth, in a fixed order."""
    params = []
    for x, y in _grid():
        params.append(
            ChoiceParameter(f"OSC{x}{y}WAVETYPE", f"osc {x}x{y} wave type", WAVE_CHOICES, 0)
        )
    for x, y in _grid():
        params.append(
            FloatParameter(f"OSC{x}{y}PITCH", f"osc {x}x{y} pitch", -2400.0, 2400.0, 0.1, 0.0)
        )

    params.append(ChoiceParameter("LFO1WAVETYPE", "Lfo 1 wave type", WAVE_CHOICES, 0))
    params.append(FloatParameter("LFO1DEPTH", "lfo 1 depth", 0.0, 1.0, 0.001, 0.0))
    params.append(FloatParameter("LFO1FREQUENCY", "lfo 1 frequency", 0.0, 10.0, 0.001, 0.0))

    for row in range(1, 4):
        prefix = f"OSC{row}"
        params.extend(
            [
                ChoiceParameter(f"{prefix}FILTERTYPE", "filter type", FILTER_CHOICES, 0),
                FloatParameter(f"{prefix}CUTOFF", "cutoff", 0.0, 20000.0, 0.01, 0.0),
                FloatParameter(f"{prefix}RESONANCE", "resonance", 0.1, 12.0, 0.01, 0.2),
                FloatParameter(f"{prefix}ATTACK", "attack", 0.0, 5.0, 0.01, 0.01),
                FloatParameter(f"{prefix}DECAY", "decay", 0.0, 5.0, 0.01, 0.01),
                FloatParameter(f"{prefix}SUSTAIN", "sustain", 0.0, 5.0, 0.01, 0.01),
                FloatParameter(f"{prefix}RELEASE", "release", 0.0, 5.0, 0.01, 0.01),
                FloatParameter(f"{prefix}GAIN", "gain", -50.0, 6.0, 0.01, -3.0),
            ]
        )

    for x, y in _grid():
        params.append(BoolParameter(f"OSC{x}{y}ACTIVE", "osc active", (x, y) == (1, 1)))

    params.extend(
        [
            ChoiceParameter(
                "CUSTOMOSCFUNCTIONTYPE", "function type", CUSTOM_FUNCTION_CHOICES, 0
            ),
            IntParameter("CUSTOMOSCACCURACY", "accuracy", 1, 10, 1),
            FloatParameter("CUSTOMOSCMUL", "multiply val", 1.0, 5.0, 0.01, 1.0),
            FloatParameter("CUSTOMOSCREPEATN", "repeat N", 1.0, 5.0, 1.0, 1.0),
            FloatParameter("CUSTOMOSCREPEATX", "repeat X", 1.0, 5.0, 1.0, 1.0),
            FloatParameter("CUSTOMOSCPITCH", "custom pitch", -2400.0, 2400.0, 0.1, 0.0),
            BoolParameter("CUSTOMOSCENABLED", "custom osc enabled", False),
            FloatParameter("MASTERATTACK", "attack", 0.0, 5.0, 0.01, 0.01),
            FloatParameter("MASTERDECAY", "decay", 0.0, 5.0, 0.01, 0.01),
            FloatParameter("MASTERSUSTAIN", "sustain", 0.0, 5.0, 0.01, 0.01),
            FloatParameter("MASTERRELEASE", "release", 0.0, 5.0, 0.01, 0.01),
            FloatParameter("MASTERGAIN", "gain", -50.0, 6.0, 0.01, -3.0),
            FloatParameter("REVERBROOMSIZE", "room size", 0.0, 1.0, 0.01, 0.0),
            FloatParameter("REVERBDAMPING", "damping", 0.0, 1.0, 0.01, 0.0),
            FloatParameter("REVERBWETLEVEL", "wet level", 0.0, 1.0, 0.01, 0.0),
            FloatParameter("REVERBDRYLEVEL", "dry level", 0.0, 1.0, 0.01, 0.0),
            FloatParameter("REVERBWIDTH", "width", 0.0, 1.0, 0.01, 0.0),
            FloatParameter("REVERBFREEZEMODE", "freeze mode", 0.0, 0.5, 0.005, 0.0),
            BoolParameter("REVERBACTIVE", "reverb active", False),
            FloatParameter("CHORUSRATE", "rate", 0.0, 10.0, 0.01, 0.0),
            FloatParameter("CHORUSDEPTH", "depth", 0.0, 1.0, 0.01, 0.0),
            FloatParameter("CHORUSCENTREDELAY", "centre delay", 0.0, 1000.0, 0.1, 0.0),
            FloatParameter("CHORUSFEEDBACK", "feedback", -1.0, 1.0, 0.01, 0.0),
            FloatParameter("CHORUSMIX", "mix", 0.0, 1.0, 0.01, 0.0),
            BoolParameter("CHORUSACTIVE", "chorus active", False),
        ]
    )
    return params