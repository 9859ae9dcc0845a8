"""One polyphonic voice: a 3x3 oscillator grid, a series oscillator and master effects."""

from __future__ import annotations

import numpy as np

from gridsynth.dsp import Adsr, AdsrParameters, Gain, midi_note_to_hz
from gridsynth.effects import Chorus, Reverb, ReverbParameters
from gridsynth.oscillator import CustomOscillator
from gridsynth.row import OscillatorRow


class SynthSound:
    """The single sound the synth plays; it covers every note and channel."""

    def applies_to_note(self, note):
        return True

    def applies_to_channel(self, channel):
        return True


class SynthVoice:
    """A voice rendering the oscillator grid through an envelope, gain, reverb and chorus."""

    def __init__(self):
        self.rows = [OscillatorRow() for _ in range(3)]
        self.adsr = Adsr()
        self.adsr_parameters = AdsrParameters(attack=0.0, decay=0.1, sustain=0.1, release=0.1)
        self.gain = Gain(1.0)
        self.custom_oscillator = CustomOscillator()

        self.reverb = Reverb()
        self.reverb.enabled = True
        self.reverb_parameters = ReverbParameters(
            width=0.5, damping=0.5, dry_level=0.5, freeze_mode=0.5, wet_level=0.5
        )
        self.reverb.set_parameters(self.reverb_parameters)

        self.chorus = Chorus()
        self.chorus.set_rate(0.0)
        self.chorus.set_depth(0.0)
        self.chorus.set_centre_delay(0.0)
        self.chorus.set_feedback(0.0)
        self.chorus.set_mix(0.0)
        self.chorus_active = False

        self.current_note = None
        self.velocity = 0.0

    def _row(self, index):
        position = int(index)
        if not 1 <= position <= len(self.rows):
            raise IndexError(f"row {index} is outside 1..{len(self.rows)}")
        return self.rows[position - 1]

    def can_play_sound(self, sound):
        return sound is not None

    def is_voice_active(self):
        return self.current_note is not None

    def start_note(self, midi_note, velocity):
        self.current_note = int(midi_note)
        self.velocity = float(velocity)
        self.adsr.reset()
        for row in self.rows:
            row.start_note(midi_note)
        if self.custom_oscillator.active:
            self.custom_oscillator.change_frequency(midi_note_to_hz(midi_note))
        self.custom_oscillator.reset()
        self.chorus.reset()
        self.reverb.reset()
        self.reverb.set_parameters(self.reverb_parameters)
        self._update_adsr()
        self.adsr.note_on()

    def stop_note(self, velocity, allow_tail_off):
        self.adsr.note_off()

    def prepare_to_play(self, sample_rate, samples_per_block, output_channels):
        self.adsr.set_sample_rate(sample_rate)
        self.gain.prepare(sample_rate, samples_per_block, output_channels)
        self.reverb.prepare(sample_rate, samples_per_block, output_channels)
        self.chorus.prepare(sample_rate, samples_per_block, output_channels)
        for row in self.rows:
            row.prepare(sample_rate, samples_per_block, output_channels)
        if self.custom_oscillator.active:
            self.custom_oscillator.prepare(sample_rate, samples_per_block, output_channels)

    def render_next_block(self, output, start_sample, num_samples):
        """Add this voice into ``output[:, start_sample:start_sample + num_samples]``."""
        if not self.is_voice_active():
            return output
        voice_block = np.zeros((output.shape[0], num_samples))
        for row in self.rows:
            row.render(voice_block)
        if self.custom_oscillator.active:
            scratch = np.zeros_like(voice_block)
            self.custom_oscillator.render(scratch)
            voice_block += scratch
        self.adsr.apply_envelope(voice_block, 0, num_samples)
        self.gain.process(voice_block)
        if self.reverb.enabled:
            self.reverb.process(voice_block)
        if self.chorus_active:
            self.chorus.process(voice_block)
        output[:, start_sample:start_sample + num_samples] += voice_block
        if not self.adsr.is_active():
            self.current_note = None
        return output

    def change_oscillator_wave_type(self, row, column, wave_type):
        self._row(row).change_oscillator_wave_form(column, wave_type)

    def change_oscillator_is_active(self, row, column, is_active):
        self._row(row).change_oscillator_is_active(column, is_active)

    def change_detune_cents(self, row, column, detune):
        self._row(row).change_detune_cents(column, detune)

    def _update_adsr(self):
        self.adsr.set_parameters(self.adsr_parameters)

    def change_gain(self, gain):
        self.gain.set_gain_decibels(gain)

    def change_attack(self, attack):
        self.adsr_parameters.attack = float(attack)
        self._update_adsr()

    def change_decay(self, decay):
        self.adsr_parameters.decay = float(decay)
        self._update_adsr()

    def change_sustain(self, sustain):
        self.adsr_parameters.sustain = float(sustain)
        self._update_adsr()

    def change_release(self, release):
        self.adsr_parameters.release = float(release)
        self._update_adsr()

    def change_row_gain(self, row, gain):
        self._row(row).change_gain_decibels(gain)

    def change_row_attack(self, row, attack):
        self._row(row).change_adsr_attack(attack)

    def change_row_decay(self, row, decay):
        self._row(row).change_adsr_decay(decay)

    def change_row_sustain(self, row, sustain):
        self._row(row).change_adsr_sustain(sustain)

    def change_row_release(self, row, release):
        self._row(row).change_adsr_release(release)

    def change_filter_cutoff(self, row, frequency):
        self._row(row).change_filter_cutoff(frequency)

    def change_filter_resonance(self, row, resonance):
        self._row(row).change_filter_resonance(resonance)

    def change_filter_type(self, row, filter_type):
        self._row(row).change_filter(filter_type)

    def change_lfo_frequency(self, rate):
        for row in self.rows:
            row.change_lfo_frequency(rate)

    def change_lfo_depth(self, depth):
        for row in self.rows:
            row.change_lfo_depth(depth)

    def change_lfo_wave_type(self, index):
        for row in self.rows:
            row.change_lfo_wave_type(index)

    def change_custom_osc_function(self, type_index, accuracy, mul_val, repeat_x, repeat_n):
        self.custom_oscillator.change_function_type(
            type_index, accuracy, mul_val, repeat_x, repeat_n
        )

    def change_custom_osc_is_active(self, is_active):
        self.custom_oscillator.active = bool(is_active)

    def change_custom_osc_pitch(self, pitch):
        self.custom_oscillator.change_pitch(pitch)

    # Reverb settings take effect at the next note.
    def change_reverb_room_size(self, room_size):
        self.reverb_parameters.room_size = float(room_size)

    def change_reverb_damping(self, damping):
        self.reverb_parameters.damping = float(damping)

    def change_reverb_wet_level(self, wet_level):
        self.reverb_parameters.wet_level = float(wet_level)

    def change_reverb_dry_level(self, dry_level):
        self.reverb_parameters.dry_level = float(dry_level)

    def change_reverb_width(self, width):
        self.reverb_parameters.width = float(width)

    def change_reverb_freeze_mode(self, freeze_mode):
        self.reverb_parameters.freeze_mode = float(freeze_mode)

    def set_reverb_active(self, is_active):
        self.reverb.enabled = bool(is_active)

    def change_chorus_rate(self, rate):
        self.chorus.set_rate(rate)

    def change_chorus_depth(self, depth):
        self.chorus.set_depth(depth)

    def change_chorus_centre_delay(self, delay):
        self.chorus.set_centre_delay(delay)

    def change_chorus_feedback(self, feedback):
        self.chorus.set_feedback(feedback)

    def change_chorus_mix(self, mix):
        self.chorus.set_mix(mix)

    def change_chorus_active(self, is_active):
        self.chorus_active = bool(is_active)