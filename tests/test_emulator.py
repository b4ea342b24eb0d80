"""Tests for the event-driven spike-injection emulator."""

import numpy as np
import pytest

from brainfusion.simulation.emulator import EventEmulator, build_emulator
from brainfusion.simulation.network import SpikingNetwork
from brainfusion.simulation.neuron import get_neuron_params


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def _zero_net(n=3, **kwargs):
    return SpikingNetwork(n, weights=np.zeros((n, n)), **kwargs)


@pytest.fixture
def emulator():
    return EventEmulator(_zero_net())


# ---------------------------------------------------------------------------
# Queue behaviour
# ---------------------------------------------------------------------------

class TestQueue:
    def test_starts_empty(self, emulator):
        assert emulator.n_pending == 0
        assert emulator.pending_spikes == ()

    def test_inject_appends(self, emulator):
        emulator.inject_spike(0, 1.0)
        emulator.inject_spike(2, 0.5)
        assert emulator.pending_spikes == ((0, 1.0), (2, 0.5))

    def test_step_event_drains_queue(self, emulator):
        emulator.inject_spike(0, 1.0)
        emulator.inject_spike(7, 1.0)
        emulator.step_event(1.0)
        assert emulator.n_pending == 0

    def test_rejected_dt_keeps_queue(self, emulator):
        emulator.inject_spike(0, 1.0)
        with pytest.raises(ValueError, match="dt"):
            emulator.step_event(0.0)
        assert emulator.n_pending == 1
        assert emulator.network.sim_time == 0.0

    @pytest.mark.parametrize("index", [np.float64(0.0), 1.0, "0"])
    def test_non_integer_index_rejected_on_injection(self, emulator, index):
        with pytest.raises(TypeError):
            emulator.inject_spike(index, 0.0)
        assert emulator.n_pending == 0
        assert not emulator.step_event(1.0).any()

    def test_numpy_integer_index(self, emulator):
        emulator.inject_spike(np.int64(2), 0.0)
        assert emulator.pending_spikes == ((2, 0.0),)
        np.testing.assert_array_equal(emulator.step_event(1.0),
                                      [False, False, True])

    def test_late_events_are_consumed(self, emulator):
        emulator.step_event(1.0)
        emulator.step_event(1.0)
        emulator.inject_spike(1, -100.0)
        spikes = emulator.step_event(1.0)
        np.testing.assert_array_equal(spikes, [False, True, False])


# ---------------------------------------------------------------------------
# Conversion to currents
# ---------------------------------------------------------------------------

class TestStepEvent:
    def test_single_injection_matches_direct_step(self, emulator):
        reference = _zero_net()
        emulator.inject_spike(0, 0.0)
        via_events = emulator.step_event(1.0)
        direct = reference.step([1.0, 0.0, 0.0], 1.0)
        np.testing.assert_array_equal(via_events, direct)
        np.testing.assert_array_equal(via_events, [True, False, False])
        np.testing.assert_array_equal(emulator.network.weights,
                                      reference.weights)

    def test_no_events_equals_zero_input(self):
        emu = EventEmulator(SpikingNetwork(4, seed=9))
        reference = SpikingNetwork(4, seed=9)
        for _ in range(5):
            np.testing.assert_array_equal(emu.step_event(1.0),
                                          reference.step(np.zeros(4), 1.0))
        np.testing.assert_array_equal(emu.network.weights, reference.weights)

    def test_repeated_events_accumulate(self):
        emu = EventEmulator(_zero_net(), injection_strength=0.6)
        emu.inject_spike(1, 0.0)
        emu.inject_spike(1, 0.0)
        emu.inject_spike(2, 0.0)
        spikes = emu.step_event(1.0)
        np.testing.assert_array_equal(spikes, [False, True, False])
        assert emu.network.neurons[2].membrane_potential == pytest.approx(0.6)

    @pytest.mark.parametrize("index", [3, 100, -1])
    def test_out_of_range_dropped(self, emulator, index):
        emulator.inject_spike(index, 0.0)
        spikes = emulator.step_event(1.0)
        assert not spikes.any()
        np.testing.assert_array_equal(
            emulator.network.membrane_potentials(), 0.0)

    def test_queue_not_replayed(self):
        """With no refractory period a replayed event would fire neuron 0 again."""
        params = get_neuron_params("no_refractory")
        emu = EventEmulator(_zero_net(neuron_params=params))
        reference = _zero_net(neuron_params=params)

        emu.inject_spike(0, 0.0)
        first = emu.step_event(1.0)
        second = emu.step_event(1.0)

        np.testing.assert_array_equal(first, [True, False, False])
        np.testing.assert_array_equal(second, [False, False, False])
        reference.step([1.0, 0.0, 0.0], 1.0)
        np.testing.assert_array_equal(second, reference.step(np.zeros(3), 1.0))


class TestBuildEmulator:
    def test_builds_owned_network(self, capsys):
        emu = build_emulator(5, injection_strength=2.0, seed=1)
        assert emu.network.n_neurons == 5
        assert emu.injection_strength == 2.0
        np.testing.assert_array_equal(emu.network.weights,
                                      SpikingNetwork(5, seed=1).weights)
        assert "brainfusion:simulation.emulator INFO" in capsys.readouterr().out
