"""Engine tests — synthetic headsets fed on a simulated 10 Hz tick clock."""

import numpy as np
import pytest

from mindstate.ble.protocol import SAMPLE_RATE
from mindstate.config import MindStateConfig
from mindstate.device import Telemetry, Vector3
from mindstate.engine.calibration import Calibration, CalibrationPhase
from mindstate.engine.engine import BrainStateEngine
from mindstate.engine.state import INITIAL_STATE
from mindstate.eeg.bands import compute_band_powers
from mindstate.eeg.synthetic import SyntheticHeadset
from mindstate.events.base import EventType

TICK = 0.1


def _run(engine, headset, seconds, start=0.0):
    """Feed ``headset`` into ``engine`` tick by tick; return produced states."""
    states = []
    first = int(round(start / TICK)) + 1
    last = int(round((start + seconds) / TICK))
    for i in range(first, last + 1):
        now = i * TICK
        target = int(round(now * SAMPLE_RATE))
        chunk = headset.generate(target - headset.position)
        for ch, samples in enumerate(chunk):
            engine.push_samples(ch, samples)
        state = engine.tick(now)
        if state is not None:
            states.append(state)
    return states


@pytest.fixture
def engine():
    e = BrainStateEngine(MindStateConfig())
    e.start(now=0.0)
    return e


class TestBandPowerTick:
    def test_no_state_until_a_full_window(self, engine):
        headset = SyntheticHeadset()
        states = _run(engine, headset, 0.9)
        assert states == []
        assert engine.latest_state is INITIAL_STATE

    def test_first_state_at_256_samples(self, engine):
        states = _run(engine, SyntheticHeadset(), 1.0)
        assert len(states) == 1
        assert engine.latest_state is states[0]

    def test_not_streaming_before_start(self):
        e = BrainStateEngine()
        e.push_samples(0, np.zeros(300))
        assert e.tick(1.0) is None

    def test_one_valid_channel_is_enough(self, engine):
        engine.push_samples(3, 20 * np.sin(2 * np.pi * 10 * np.arange(256) / SAMPLE_RATE))
        state = engine.tick(1.0)
        assert state is not None
        assert state.alpha == max(state.bands().values())

    def test_relative_powers_sum_to_one(self, engine):
        states = _run(engine, SyntheticHeadset(noise=5.0), 10.0)
        assert states
        for state in states:
            assert sum(state.bands().values()) == pytest.approx(1.0)
            assert all(0.0 <= v <= 1.0 for v in state.bands().values())

    def test_first_tick_initializes_smoothing(self, engine):
        states = _run(engine, SyntheticHeadset(noise=5.0), 1.0)
        assert len(states) == 1
        # No ramp-up from zero: the smoothed value is the raw average
        smoothed = engine.smoothed_bands
        assert smoothed["alpha"] > 0
        window_powers = []
        for buf in engine.stream.channels:
            window_powers.append(compute_band_powers(buf.read_newest(256))["alpha"])
        assert smoothed["alpha"] == pytest.approx(np.mean(window_powers))

    def test_flat_start_does_not_ramp_from_zero(self, engine):
        engine.push_samples(1, np.zeros(256))
        assert engine.tick(0.1) is not None
        assert engine.smoothed_bands["alpha"] == 0.0

        window = 20 * np.sin(2 * np.pi * 10 * np.arange(256) / SAMPLE_RATE)
        engine.push_samples(1, window)
        engine.tick(0.2)
        # A band still at 0 takes the raw power instead of 20% of it
        assert engine.smoothed_bands["alpha"] == pytest.approx(compute_band_powers(window)["alpha"])

    def test_nonzero_band_is_blended(self, engine):
        first = 20 * np.sin(2 * np.pi * 10 * np.arange(256) / SAMPLE_RATE)
        engine.push_samples(1, first)
        engine.tick(0.1)
        second = 2 * first
        engine.push_samples(1, second)
        engine.tick(0.2)
        expected = 0.8 * compute_band_powers(first)["alpha"] + 0.2 * compute_band_powers(second)["alpha"]
        assert engine.smoothed_bands["alpha"] == pytest.approx(expected)

    def test_silence_has_well_defined_state(self, engine):
        states = _run(engine, SyntheticHeadset(amplitude=0.0), 10.0)
        last = states[-1]
        assert not last.calibrating
        assert sum(last.bands().values()) == 0.0
        assert last.focus == 0.0
        assert last.calm == 0.0
        assert last.focused is False


class TestCalibration:
    def test_progress_monotonic_and_single_transition(self, engine):
        states = _run(engine, SyntheticHeadset(noise=5.0), 12.0)
        flags = [s.calibrating for s in states]
        # True...True then False...False
        transitions = sum(1 for a, b in zip(flags, flags[1:]) if a != b)
        assert transitions == 1
        assert flags[0] is True and flags[-1] is False

        progress = [s.calibration_progress for s in states]
        assert all(b >= a for a, b in zip(progress, progress[1:]))
        assert all(s.calibration_progress == 1.0 for s in states if not s.calibrating)
        assert all(s.focus == 0.0 and s.calm == 0.0 for s in states if s.calibrating)

    def test_progress_fraction(self, engine):
        states = _run(engine, SyntheticHeadset(), 2.0)
        assert states[-1].calibration_progress == pytest.approx(2.0 / 8.0)

    def test_thresholds_frozen_after_window(self, engine):
        headset = SyntheticHeadset(noise=5.0)
        _run(engine, headset, 9.0)
        result = engine.calibration.result
        assert engine.calibration.phase is CalibrationPhase.CALIBRATED

        headset.frequency = 20.0
        _run(engine, headset, 3.0, start=9.0)
        assert engine.calibration.result is result

    def test_alpha_scenario(self, engine):
        states = _run(engine, SyntheticHeadset(frequency=10.0, amplitude=50.0, noise=2.0), 12.0)
        last = states[-1]
        assert not last.calibrating
        assert last.alpha == max(last.bands().values())
        assert last.alpha > 0.9
        # Steady alpha sits at half of twice the baseline
        assert last.calm == pytest.approx(0.5, abs=0.05)

    def test_focus_rises_with_beta(self, engine):
        headset = SyntheticHeadset(frequency=10.0, amplitude=50.0, noise=2.0)
        _run(engine, headset, 9.0)
        assert engine.calibration.result.focus_threshold > 0

        headset.frequency = 20.0
        states = _run(engine, headset, 3.0, start=9.0)
        last = states[-1]
        assert last.focused is True
        assert last.focus == pytest.approx(1.0)


class TestCalibrationUnit:
    def test_sixtieth_percentile(self):
        cal = Calibration(duration=1.0, percentile=0.6)
        cal.start(0.0)
        for i, ratio in enumerate([5.0, 1.0, 4.0, 2.0, 3.0]):
            assert cal.update(0.1 * i, ratio, 0.3) is True
        assert cal.update(1.0, 9.0, 0.4) is False
        # sorted [1, 2, 3, 4, 5], floor(0.6 * 5) = 3
        assert cal.result.focus_threshold == 4.0
        assert cal.result.calm_baseline == 0.4

    def test_no_observations(self):
        cal = Calibration(duration=1.0)
        cal.start(0.0)
        assert cal.update(2.0, 1.0, 0.5) is False
        assert cal.result.focus_threshold is None
        assert cal.result.calm_baseline is None

    def test_zero_threshold_is_still_calibrated(self):
        cal = Calibration(duration=1.0)
        cal.start(0.0)
        cal.update(0.5, 0.0, 0.0)
        cal.update(1.0, 0.0, 0.0)
        assert cal.phase is CalibrationPhase.CALIBRATED
        assert cal.result.focus_threshold == 0.0
        # Further updates never recalibrate
        cal.update(5.0, 3.0, 0.7)
        assert cal.result.focus_threshold == 0.0

    def test_uncalibrated_progress(self):
        cal = Calibration()
        assert cal.phase is CalibrationPhase.UNCALIBRATED
        assert cal.calibrating
        assert cal.progress(0.0) == 0.0


class TestEvents:
    def test_blink_scenario(self, engine):
        headset = SyntheticHeadset(frequency=10.0, amplitude=20.0)
        before = _run(engine, headset, 0.9)
        assert before == []

        headset.blink(500.0)
        state = _run(engine, headset, 0.1, start=0.9)[-1]
        assert state.blinks == 1
        assert state.clenches == 0

    def test_clench_counted_and_published(self, engine):
        received = []
        engine.events.subscribe(None, received.append)
        headset = SyntheticHeadset(amplitude=20.0)
        _run(engine, headset, 1.5)
        headset.clench(400.0)
        _run(engine, headset, 0.1, start=1.5)
        assert engine.latest_state.clenches == 1
        assert [e.type for e in received] == [EventType.CLENCH]

    def test_blinks_counted_before_first_state(self, engine):
        headset = SyntheticHeadset(amplitude=20.0)
        headset.blink()
        _run(engine, headset, 1.0)
        assert engine.latest_state.blinks == 1


class TestLifecycle:
    def test_restart_resets_everything(self, engine):
        headset = SyntheticHeadset(noise=5.0)
        headset.blink()
        _run(engine, headset, 10.0)
        assert not engine.latest_state.calibrating
        assert engine.latest_state.blinks == 1

        # Spike buffered before the restart must not be counted after it
        headset.blink()
        chunk = headset.generate(26)
        for ch, samples in enumerate(chunk):
            engine.push_samples(ch, samples)
        engine.start(now=20.0)
        assert engine.latest_state is INITIAL_STATE

        state = engine.tick(20.1)
        assert state.calibrating
        assert state.blinks == 0
        assert state.calibration_progress == pytest.approx(0.1 / 8.0)

    def test_stop_prevents_ticks(self, engine):
        _run(engine, SyntheticHeadset(), 1.0)
        engine.stop()
        latest = engine.latest_state
        assert engine.tick(1.1) is None
        assert engine.latest_state is latest

    def test_observers(self, engine):
        seen = []
        engine.subscribe(seen.append)
        states = _run(engine, SyntheticHeadset(), 1.5)
        assert seen == states
        engine.unsubscribe(seen.append)
        _run(engine, SyntheticHeadset(), 0.1, start=1.5)
        assert len(seen) == len(states)

    def test_uses_injected_clock(self):
        now = [0.0]
        e = BrainStateEngine(clock=lambda: now[0])
        e.start()
        e.push_samples(0, np.zeros(256))
        now[0] = 4.0
        assert e.tick().calibration_progress == pytest.approx(0.5)


class TestIngestionBoundary:
    def test_out_of_range_channel_is_noop(self, engine):
        engine.push_sample(9, 1.0)
        engine.push_samples(-1, [1.0, 2.0])
        assert engine.stream.total_samples() == 0

    def test_motion_and_telemetry(self, engine):
        engine.set_motion("accel", Vector3(0.0, 0.0, 1.0))
        engine.set_motion("gyro", Vector3(1.5, -2.0, 0.25))
        engine.set_motion("magnetometer", Vector3(9.0, 9.0, 9.0))
        engine.set_telemetry(Telemetry(87, 31.5))
        assert engine.accel == Vector3(0.0, 0.0, 1.0)
        assert engine.gyro == Vector3(1.5, -2.0, 0.25)
        assert engine.telemetry.battery == 87
