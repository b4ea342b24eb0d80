"""Tests for the LIF neuron state machine."""

import dataclasses

import pytest

from brainfusion.simulation.neuron import (
    LIFParams,
    LIFNeuron,
    NEURON_PRESETS,
    get_neuron_params,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def neuron():
    """Default neuron: threshold 1, reset 0, tau 20, refractory 5."""
    return LIFNeuron()


def _spike_once(nrn, t=1.0):
    assert nrn.integrate(1.2, 1.0, t)


# ---------------------------------------------------------------------------
# LIFParams
# ---------------------------------------------------------------------------

class TestLIFParams:
    def test_default_values(self):
        p = LIFParams()
        assert p.threshold == 1.0
        assert p.reset_potential == 0.0
        assert p.tau == 20.0
        assert p.refractory_period == 5.0

    def test_frozen(self):
        p = LIFParams()
        with pytest.raises(dataclasses.FrozenInstanceError):
            p.tau = 10.0

    @pytest.mark.parametrize("tau", [0.0, -1.0])
    def test_rejects_non_positive_tau(self, tau):
        with pytest.raises(ValueError, match="tau"):
            LIFParams(tau=tau)

    def test_rejects_negative_refractory(self):
        with pytest.raises(ValueError, match="refractory"):
            LIFParams(refractory_period=-0.5)

    def test_to_dict(self):
        d = LIFParams(name="x", threshold=2.0).to_dict()
        assert d["name"] == "x"
        assert d["threshold"] == 2.0
        assert set(d) == {"name", "threshold", "reset_potential", "tau",
                          "refractory_period"}


class TestPresets:
    def test_default_preset(self):
        assert get_neuron_params("default") == LIFParams()

    def test_all_presets_named_consistently(self):
        for name, params in NEURON_PRESETS.items():
            assert params.name == name

    def test_unknown_preset(self):
        with pytest.raises(KeyError, match="Available"):
            get_neuron_params("purkinje")


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------

class TestInitialState:
    def test_fresh_neuron(self, neuron):
        assert neuron.membrane_potential == 0.0
        assert neuron.last_spike_time == -1.0
        assert not neuron.spiked
        assert not neuron.has_spiked

    def test_starts_outside_refractory_window(self, neuron):
        assert neuron.time_since_spike == neuron.params.refractory_period

    def test_reset_state(self, neuron):
        _spike_once(neuron)
        neuron.integrate(0.3, 1.0, 2.0)
        neuron.reset_state()
        assert neuron.membrane_potential == 0.0
        assert neuron.last_spike_time == -1.0
        assert not neuron.spiked
        assert neuron.time_since_spike == 5.0


# ---------------------------------------------------------------------------
# Integration
# ---------------------------------------------------------------------------

class TestIntegrate:
    def test_suprathreshold_input_spikes_first_step(self, neuron):
        """0 + 1.0 * (0/20 + 1.2) = 1.2 >= 1.0."""
        spiked = neuron.integrate(1.2, 1.0, 1.0)
        assert spiked
        assert neuron.spiked
        assert neuron.membrane_potential == 0.0
        assert neuron.time_since_spike == 0.0
        assert neuron.last_spike_time == 1.0
        assert neuron.has_spiked

    def test_exact_threshold_spikes(self, neuron):
        assert neuron.integrate(1.0, 1.0, 1.0)

    def test_subthreshold_accumulates(self, neuron):
        assert not neuron.integrate(0.5, 1.0, 1.0)
        assert neuron.membrane_potential == pytest.approx(0.5)
        assert not neuron.integrate(0.5, 1.0, 2.0)
        assert neuron.membrane_potential == pytest.approx(0.975)
        assert neuron.integrate(0.5, 1.0, 3.0)
        assert neuron.last_spike_time == 3.0

    def test_leak_without_input(self, neuron):
        neuron.membrane_potential = 0.5
        neuron.integrate(0.0, 1.0, 1.0)
        assert neuron.membrane_potential == pytest.approx(0.5 - 0.5 / 20.0)

    def test_spiked_flag_not_sticky(self, neuron):
        _spike_once(neuron)
        neuron.integrate(0.0, 1.0, 2.0)
        assert not neuron.spiked
        assert neuron.last_spike_time == 1.0

    def test_negative_current_hyperpolarizes(self, neuron):
        neuron.integrate(-0.3, 1.0, 1.0)
        assert neuron.membrane_potential == pytest.approx(-0.3)
        assert not neuron.spiked


class TestRefractory:
    @pytest.mark.parametrize("current", [0.0, 1.2, 100.0, -50.0])
    def test_clamped_during_refraction(self, neuron, current):
        _spike_once(neuron)
        for k in range(4):
            assert not neuron.integrate(current, 1.0, 2.0 + k)
            assert neuron.membrane_potential == neuron.params.reset_potential

    def test_spikes_again_after_window(self, neuron):
        _spike_once(neuron)
        spikes = [neuron.integrate(100.0, 1.0, 2.0 + k) for k in range(5)]
        assert spikes == [False, False, False, False, True]
        assert neuron.last_spike_time == 6.0

    def test_refractory_uses_reset_potential(self):
        nrn = LIFNeuron(params=LIFParams(reset_potential=-0.5))
        _spike_once(nrn)
        assert nrn.membrane_potential == -0.5
        nrn.integrate(10.0, 1.0, 2.0)
        assert nrn.membrane_potential == -0.5

    def test_zero_refractory_period(self):
        nrn = LIFNeuron(params=get_neuron_params("no_refractory"))
        _spike_once(nrn)
        assert nrn.integrate(1.2, 1.0, 2.0)


class TestEventualSpike:
    def test_constant_drive_spikes_in_bounded_steps(self, neuron):
        """Steady state is I * tau = 1.2 > threshold; crossing takes ~35 steps."""
        for k in range(100):
            if neuron.integrate(0.06, 1.0, float(k + 1)):
                break
        assert neuron.has_spiked
        assert 30 <= neuron.last_spike_time <= 40

    def test_faster_tau_needs_more_drive(self):
        """With tau=5 the steady state 0.06 * 5 = 0.3 never reaches threshold."""
        nrn = LIFNeuron(params=LIFParams(tau=5.0))
        for k in range(500):
            nrn.integrate(0.06, 1.0, float(k + 1))
        assert not nrn.has_spiked
