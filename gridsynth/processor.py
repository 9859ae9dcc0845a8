"""Polyphonic voice allocation and the processor that drives the voices from parameters."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from gridsynth.dsp import Gain
from gridsynth.effects import soft_clip
from gridsynth.parameters import ParameterState
from gridsynth.voice import SynthSound, SynthVoice

NUM_VOICES = 32
MASTER_GAIN_DB = -6.0
SUPPORTED_OUTPUT_CHANNELS = (1, 2)

_GRID = tuple((x, y) for x in range(1, 4) for y in range(1, 4))
_ROWS = (1, 2, 3)


@dataclass(frozen=True)
class MidiEvent:
    """A note event at a sample offset in a block; a note-on of velocity 0 is a note-off."""

    position: int
    note: int
    velocity: float = 1.0
    note_on: bool = True
    channel: int = 1

    def __post_init__(self):
        if self.position < 0:
            raise ValueError("event position cannot be negative")
        if not 0 <= self.note <= 127:
            raise ValueError("MIDI note must lie in 0..127")
        if not 0.0 <= self.velocity <= 1.0:
            raise ValueError("velocity must lie in [0, 1]")
        if not 1 <= self.channel <= 16:
            raise ValueError("MIDI channel must lie in 1..16")

    @property
    def is_note_on(self):
        return self.note_on and self.velocity > 0.0


@dataclass(eq=False)
class _Slot:
    voice: object
    sound: object = None
    channel: int = 0
    note: int = -1
    key_down: bool = False
    started: int = 0


class Synthesiser:
    """Hands incoming notes to a pool of voices, stealing voices when all are busy."""

    def __init__(self):
        self.sounds = []
        self.note_stealing_enabled = True
        self.sample_rate = 0.0
        self._slots = []
        self._note_counter = 0

    @property
    def voices(self):
        return [slot.voice for slot in self._slots]

    def add_voice(self, voice):
        self._slots.append(_Slot(voice))
        return voice

    def add_sound(self, sound):
        self.sounds.append(sound)
        return sound

    def set_current_playback_sample_rate(self, sample_rate):
        """Change the rate; a real change silences every sounding voice at once."""
        if sample_rate <= 0:
            raise ValueError("sample rate must be positive")
        if float(sample_rate) != self.sample_rate:
            self._all_notes_off()
            self.sample_rate = float(sample_rate)

    def _all_notes_off(self):
        for slot in self._slots:
            if slot.voice.is_voice_active():
                slot.key_down = False
                slot.voice.stop_note(1.0, False)

    def _is_playing(self, slot, channel, note):
        return slot.voice.is_voice_active() and slot.note == note and slot.channel == channel

    def note_on(self, channel, note, velocity):
        for sound in self.sounds:
            if not (sound.applies_to_note(note) and sound.applies_to_channel(channel)):
                continue
            for slot in self._slots:
                if self._is_playing(slot, channel, note):
                    slot.voice.stop_note(1.0, True)
            slot = self._find_free_slot(sound, note)
            if slot is not None:
                self._start(slot, sound, channel, note, velocity)

    def note_off(self, channel, note, velocity):
        for slot in self._slots:
            if not self._is_playing(slot, channel, note):
                continue
            sound = slot.sound
            if sound is not None and sound.applies_to_note(note) and sound.applies_to_channel(
                channel
            ):
                slot.key_down = False
                slot.voice.stop_note(velocity, True)

    def _start(self, slot, sound, channel, note, velocity):
        if slot.voice.is_voice_active():
            slot.voice.stop_note(0.0, False)
        self._note_counter += 1
        slot.sound = sound
        slot.channel = channel
        slot.note = note
        slot.key_down = True
        slot.started = self._note_counter
        slot.voice.start_note(note, velocity)

    def _find_free_slot(self, sound, note):
        for slot in self._slots:
            if not slot.voice.is_voice_active() and slot.voice.can_play_sound(sound):
                return slot
        if self.note_stealing_enabled:
            return self._slot_to_steal(sound, note)
        return None

    def _slot_to_steal(self, sound, note):
        usable = sorted(
            (slot for slot in self._slots if slot.voice.can_play_sound(sound)),
            key=lambda slot: slot.started,
        )
        if not usable:
            return None
        held = [slot for slot in usable if slot.key_down]
        low = min(held, key=lambda slot: slot.note) if held else None
        top = max(held, key=lambda slot: slot.note) if held else None
        if top is low:
            top = None
        protected = (low, top)

        for slot in usable:
            if slot.note == note:
                return slot
        for slot in usable:
            if slot not in protected and not slot.key_down:
                return slot
        for slot in usable:
            if slot not in protected:
                return slot
        return top if top is not None else low

    def _handle(self, event):
        if event.is_note_on:
            self.note_on(event.channel, event.note, event.velocity)
        else:
            self.note_off(event.channel, event.note, event.velocity)

    def _render_voices(self, buffer, start, count):
        for slot in self._slots:
            slot.voice.render_next_block(buffer, start, count)

    def render_next_block(self, buffer, events, start_sample, num_samples):
        """Render ``num_samples`` from ``start_sample``, applying events at their positions."""
        if num_samples < 0:
            raise ValueError("sample count cannot be negative")
        end = start_sample + num_samples
        pending = sorted(
            (event for event in events if start_sample <= event.position < end),
            key=lambda event: event.position,
        )
        position = start_sample
        for event in pending:
            if event.position > position:
                self._render_voices(buffer, position, event.position - position)
                position = event.position
            self._handle(event)
        if position < end:
            self._render_voices(buffer, position, end - position)
        return buffer


class SynthProcessor:
    """A 32-voice synth whose voices follow a ParameterState, with master gain and soft clip."""

    input_channels = 0

    def __init__(self, output_channels=2):
        if not self.is_buses_layout_supported(output_channels):
            raise ValueError("only mono or stereo output is supported")
        self.output_channels = int(output_channels)
        self.state = ParameterState()
        self.synthesiser = Synthesiser()
        self.synthesiser.add_sound(SynthSound())
        for _ in range(NUM_VOICES):
            self.synthesiser.add_voice(SynthVoice())
        self.synthesiser.note_stealing_enabled = True
        self.master_gain = Gain()
        self._applied = {}

    def is_buses_layout_supported(self, channels):
        return channels in SUPPORTED_OUTPUT_CHANNELS

    def prepare_to_play(self, sample_rate, samples_per_block):
        self.synthesiser.set_current_playback_sample_rate(sample_rate)
        self.master_gain.prepare(sample_rate, samples_per_block, self.output_channels)
        self.master_gain.set_gain_decibels(MASTER_GAIN_DB)
        for voice in self.synthesiser.voices:
            if isinstance(voice, SynthVoice):
                voice.prepare_to_play(sample_rate, samples_per_block, self.output_channels)

    def process_block(self, buffer, events=()):
        """Render one (channels, samples) block in place from the given MIDI events."""
        if buffer.ndim != 2:
            raise ValueError("buffer must be a (channels, samples) array")
        buffer[self.input_channels:self.output_channels] = 0.0
        settings = self._voice_settings()
        for voice in self.synthesiser.voices:
            if isinstance(voice, SynthVoice):
                self._apply(voice, settings)
        self.synthesiser.render_next_block(buffer, events, 0, buffer.shape[1])
        self.master_gain.process(buffer)
        buffer[:] = soft_clip(buffer)
        return buffer

    def get_state(self):
        return self.state.to_xml()

    def set_state(self, data):
        """Restore saved state; unreadable data is ignored and False returned."""
        try:
            self.state.load_xml(data)
        except (ValueError, TypeError):
            return False
        return True

    def _apply(self, voice, settings):
        applied = self._applied.setdefault(voice, {})
        for key, apply, args in settings:
            if applied.get(key) != args:
                apply(voice, *args)
                applied[key] = args

    def _voice_settings(self):
        value = self.state.get
        settings = []

        def entry(key, apply, *args):
            settings.append((key, apply, args))

        for x, y in _GRID:
            key = f"OSC{x}{y}WAVETYPE"
            entry(key, SynthVoice.change_oscillator_wave_type, x, y, int(value(key)))
        for x, y in _GRID:
            key = f"OSC{x}{y}ACTIVE"
            entry(key, SynthVoice.change_oscillator_is_active, x, y, bool(value(key)))

        entry("MASTERGAIN", SynthVoice.change_gain, float(value("MASTERGAIN")))
        entry("MASTERATTACK", SynthVoice.change_attack, float(value("MASTERATTACK")))
        entry("MASTERDECAY", SynthVoice.change_decay, float(value("MASTERDECAY")))
        entry("MASTERSUSTAIN", SynthVoice.change_sustain, float(value("MASTERSUSTAIN")))
        entry("MASTERRELEASE", SynthVoice.change_release, float(value("MASTERRELEASE")))

        for x, y in _GRID:
            key = f"OSC{x}{y}PITCH"
            entry(key, SynthVoice.change_detune_cents, x, y, int(value(key)))

        row_settings = (
            ("CUTOFF", SynthVoice.change_filter_cutoff),
            ("RESONANCE", SynthVoice.change_filter_resonance),
            ("GAIN", SynthVoice.change_row_gain),
            ("ATTACK", SynthVoice.change_row_attack),
            ("DECAY", SynthVoice.change_row_decay),
            ("SUSTAIN", SynthVoice.change_row_sustain),
            ("RELEASE", SynthVoice.change_row_release),
        )
        for row in _ROWS:
            key = f"OSC{row}FILTERTYPE"
            entry(key, SynthVoice.change_filter_type, row, int(value(key)))
            for suffix, apply in row_settings:
                key = f"OSC{row}{suffix}"
                entry(key, apply, row, float(value(key)))

        entry("LFO1WAVETYPE", SynthVoice.change_lfo_wave_type, int(value("LFO1WAVETYPE")))
        entry("LFO1FREQUENCY", SynthVoice.change_lfo_frequency, float(value("LFO1FREQUENCY")))
        entry("LFO1DEPTH", SynthVoice.change_lfo_depth, float(value("LFO1DEPTH")))

        entry(
            "CUSTOMOSCFUNCTION",
            SynthVoice.change_custom_osc_function,
            int(value("CUSTOMOSCFUNCTIONTYPE")),
            int(value("CUSTOMOSCACCURACY")),
            float(value("CUSTOMOSCMUL")),
            float(value("CUSTOMOSCREPEATX")),
            float(value("CUSTOMOSCREPEATN")),
        )
        entry("CUSTOMOSCPITCH", SynthVoice.change_custom_osc_pitch, float(value("CUSTOMOSCPITCH")))
        entry(
            "CUSTOMOSCENABLED",
            SynthVoice.change_custom_osc_is_active,
            bool(value("CUSTOMOSCENABLED")),
        )

        entry("REVERBROOMSIZE", SynthVoice.change_reverb_room_size, float(value("REVERBROOMSIZE")))
        entry("REVERBDAMPING", SynthVoice.change_reverb_damping, float(value("REVERBDAMPING")))
        entry("REVERBWETLEVEL", SynthVoice.change_reverb_wet_level, float(value("REVERBWETLEVEL")))
        entry("REVERBDRYLEVEL", SynthVoice.change_reverb_dry_level, float(value("REVERBDRYLEVEL")))
        entry("REVERBWIDTH", SynthVoice.change_reverb_width, float(value("REVERBWIDTH")))
        entry(
            "REVERBFREEZEMODE",
            SynthVoice.change_reverb_freeze_mode,
            float(value("REVERBFREEZEMODE")),
        )
        entry("REVERBACTIVE", SynthVoice.set_reverb_active, bool(value("REVERBACTIVE")))

        entry("CHORUSRATE", SynthVoice.change_chorus_rate, float(value("CHORUSRATE")))
        entry("CHORUSDEPTH", SynthVoice.change_chorus_depth, float(value("CHORUSDEPTH")))
        entry(
            "CHORUSCENTREDELAY",
            SynthVoice.change_chorus_centre_delay,
            float(value("CHORUSCENTREDELAY")),
        )
        entry("CHORUSFEEDBACK", SynthVoice.change_chorus_feedback, float(value("CHORUSFEEDBACK")))
        entry("CHORUSMIX", SynthVoice.change_chorus_mix, float(value("CHORUSMIX")))
        entry("CHORUSACTIVE", SynthVoice.change_chorus_active, bool(value("CHORUSACTIVE")))
        return settings