#!/usr/bin/env python3
"""Run the engine on a synthetic headset — no Muse needed.

Feeds 256 Hz synthetic EEG in 100 ms chunks and ticks the engine on a
simulated clock, so a 30 s session takes well under a second.

Usage:
    python scripts/simulate.py
    python scripts/simulate.py --frequency 20 --seconds 15
    python scripts/simulate.py --blink-at 3 --blink-at 5 --log output/sim.csv
"""

import argparse
import contextlib

from mindstate.config import MindStateConfig
from mindstate.engine.engine import BrainStateEngine
from mindstate.eeg.synthetic import SyntheticHeadset
from mindstate.recording import SessionLog


def simulate(frequency, amplitude, noise, seconds, blink_at, clench_at, log_path):
    config = MindStateConfig()
    sim_time = 0.0
    engine = BrainStateEngine(config, clock=lambda: sim_time)
    headset = SyntheticHeadset(frequency, amplitude, noise, config.sample_rate)

    engine.start()
    pending_blinks = sorted(blink_at)
    pending_clenches = sorted(clench_at)

    with contextlib.ExitStack() as stack:
        if log_path:
            engine.subscribe(stack.enter_context(SessionLog(log_path)))

        n_ticks = int(seconds / config.tick_interval)
        for i in range(1, n_ticks + 1):
            sim_time = i * config.tick_interval
            while pending_blinks and pending_blinks[0] <= sim_time:
                headset.blink()
                pending_blinks.pop(0)
            while pending_clenches and pending_clenches[0] <= sim_time:
                headset.clench()
                pending_clenches.pop(0)

            target = int(round(sim_time * config.sample_rate))
            chunk = headset.generate(target - headset.position)
            for ch, samples in enumerate(chunk):
                engine.push_samples(ch, samples)

            state = engine.tick()
            if state is not None and i % 10 == 0:
                bands = " ".join(f"{k}={v:.2f}" for k, v in state.bands().items())
                phase = "cal" if state.calibrating else "   "
                print(
                    f"  t={sim_time:5.1f}s {phase} {bands} "
                    f"focus={state.focus:.2f} calm={state.calm:.2f} "
                    f"blinks={state.blinks} clenches={state.clenches}"
                )

    if log_path:
        print(f"Log saved: {log_path}")


def main():
    ap = argparse.ArgumentParser(description="Brain state engine on synthetic EEG")
    ap.add_argument("--frequency", type=float, default=10.0, help="Dominant rhythm Hz (default: 10)")
    ap.add_argument("--amplitude", type=float, default=50.0, help="Rhythm amplitude µV (default: 50)")
    ap.add_argument("--noise", type=float, default=5.0, help="White noise std µV (default: 5)")
    ap.add_argument("--seconds", type=float, default=20.0)
    ap.add_argument("--blink-at", type=float, action="append", default=[], help="Inject a blink at t seconds")
    ap.add_argument("--clench-at", type=float, action="append", default=[], help="Inject a clench at t seconds")
    ap.add_argument("--log", default=None, help="CSV file to log every state to")
    args = ap.parse_args()
    simulate(args.frequency, args.amplitude, args.noise, args.seconds,
             args.blink_at, args.clench_at, args.log)


if __name__ == "__main__":
    main()
