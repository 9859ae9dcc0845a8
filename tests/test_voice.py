import numpy as np
import pytest

from gridsynth.voice import SynthSound, SynthVoice


def make_voice():
    voice = SynthVoice()
    voice.prepare_to_play(44100.0, 64, 2)
    voice.change_oscillator_is_active(1, 1, True)
    return voice


def test_sound_applies_everywhere():
    sound = SynthSound()
    assert sound.applies_to_note(60) is True
    assert sound.applies_to_channel(3) is True


def test_can_play_sound():
    voice = SynthVoice()
    assert voice.can_play_sound(SynthSound()) is True
    assert voice.can_play_sound(None) is False


def test_idle_voice_renders_nothing():
    voice = make_voice()
    out = voice.render_next_block(np.zeros((2, 64)), 0, 64)
    assert voice.is_voice_active() is False
    assert np.array_equal(out, np.zeros((2, 64)))


def test_start_note_activates_voice():
    voice = make_voice()
    voice.start_note(60, 0.8)
    assert voice.is_voice_active() is True
    assert voice.current_note == 60


def test_render_writes_only_its_region():
    voice = make_voice()
    voice.start_note(69, 1.0)
    out = voice.render_next_block(np.zeros((2, 128)), 32, 64)
    assert np.all(out[:, :32] == 0.0)
    assert np.all(out[:, 96:] == 0.0)
    assert np.abs(out[:, 32:96]).max() > 0.0


def test_silent_gain_renders_silence():
    voice = make_voice()
    voice.change_gain(-100.0)
    voice.start_note(69, 1.0)
    out = voice.render_next_block(np.zeros((2, 64)), 0, 64)
    assert np.array_equal(out, np.zeros((2, 64)))


def test_stop_with_no_release_frees_voice():
    voice = make_voice()
    voice.start_note(64, 1.0)
    voice.change_release(0.0)
    voice.stop_note(0.0, True)
    voice.render_next_block(np.zeros((2, 32)), 0, 32)
    assert voice.is_voice_active() is False
    assert voice.current_note is None


def test_master_adsr_changes_reach_envelope():
    voice = SynthVoice()
    voice.change_attack(0.2)
    voice.change_decay(0.3)
    voice.change_sustain(0.7)
    voice.change_release(0.4)
    assert voice.adsr_parameters.attack == 0.2
    assert voice.adsr.parameters == voice.adsr_parameters


def test_reverb_settings_apply_on_next_note():
    voice = make_voice()
    voice.change_reverb_room_size(0.3)
    voice.change_reverb_damping(0.2)
    voice.change_reverb_wet_level(0.1)
    voice.change_reverb_dry_level(0.9)
    voice.change_reverb_width(0.4)
    voice.change_reverb_freeze_mode(0.0)
    assert voice.reverb.parameters.room_size != 0.3
    voice.start_note(60, 1.0)
    assert voice.reverb.parameters == voice.reverb_parameters
    assert voice.reverb.parameters.dry_level == 0.9


def test_reverb_and_chorus_switches():
    voice = SynthVoice()
    voice.set_reverb_active(False)
    voice.change_chorus_active(True)
    assert voice.reverb.enabled is False
    assert voice.chorus_active is True


def test_chorus_settings_forwarded():
    voice = SynthVoice()
    voice.change_chorus_rate(2.0)
    voice.change_chorus_depth(0.5)
    voice.change_chorus_feedback(-0.5)
    voice.change_chorus_mix(0.75)
    assert (voice.chorus.rate, voice.chorus.depth) == (2.0, 0.5)
    assert (voice.chorus.feedback, voice.chorus.mix) == (-0.5, 0.75)


def test_custom_oscillator_settings_forwarded():
    voice = SynthVoice()
    voice.change_custom_osc_function(1, 3, 2.0, 1.0, 2.0)
    voice.change_custom_osc_pitch(100.0)
    voice.change_custom_osc_is_active(True)
    custom = voice.custom_oscillator
    assert (custom.type_index, custom.accuracy, custom.mul_val) == (1, 3, 2.0)
    assert custom.pitch == 100.0
    assert custom.active is True


def test_grid_and_row_settings_forwarded():
    voice = SynthVoice()
    voice.change_detune_cents(2, 3, 1200.0)
    voice.change_filter_type(2, 3)
    voice.change_filter_cutoff(3, 500.0)
    voice.change_filter_resonance(3, 2.0)
    voice.change_lfo_depth(0.75)
    assert voice.rows[1].oscillators[2].detune_cents == 1200.0
    assert voice.rows[1].filter_active is True
    assert voice.rows[2].filter_cutoff == 500.0
    assert voice.rows[2].filter_resonance == 2.0
    assert all(row.lfo_depth == 0.75 for row in voice.rows)


def test_row_adsr_forwarded():
    voice = SynthVoice()
    voice.change_row_attack(1, 0.5)
    voice.change_row_decay(1, 0.6)
    voice.change_row_sustain(1, 0.7)
    voice.change_row_release(1, 0.8)
    params = voice.rows[0].adsr.parameters
    assert (params.attack, params.decay, params.sustain, params.release) == (0.5, 0.6, 0.7, 0.8)


@pytest.mark.parametrize("row", [0, 4])
def test_row_index_out_of_range(row):
    voice = SynthVoice()
    with pytest.raises(IndexError):
        voice.change_row_gain(row, 0.0)
    with pytest.raises(IndexError):
        voice.change_oscillator_wave_type(row, 1, 0)