#!/usr/bin/env python3
"""Live brain state — connect to the Muse (or the relay) and print each state.

Optionally logs every state to CSV for scripts/plot_session.py.

Usage:
    python scripts/run_state.py
    python scripts/run_state.py --source relay --relay-url ws://pi.local:8765/
    python scripts/run_state.py --log output/session.csv
"""

import argparse
import asyncio
import logging
import signal
import time

from mindstate.config import MindStateConfig
from mindstate.engine.state import BrainState
from mindstate.events.base import Event
from mindstate.pipeline import Pipeline
from mindstate.recording import SessionLog


def print_state(state: BrainState) -> None:
    if state.calibrating:
        bar = "█" * int(state.calibration_progress * 20)
        print(f"  calibrating [{bar:<20}] {state.calibration_progress * 100:3.0f}%   ",
              end="\r", flush=True)
        return
    focus_bar = "█" * int(state.focus * 20) + "░" * (20 - int(state.focus * 20))
    print(
        f"  δ={state.delta:.2f} θ={state.theta:.2f} α={state.alpha:.2f} "
        f"β={state.beta:.2f} γ={state.gamma:.2f} "
        f"focus=[{focus_bar}] calm={state.calm:.2f} "
        f"{'FOCUSED' if state.focused else '       '} "
        f"blinks={state.blinks} clenches={state.clenches}   ",
        end="\r", flush=True,
    )


def print_event(event: Event) -> None:
    print(f"\n  [{time.strftime('%H:%M:%S')}] {event}")


async def run(config: MindStateConfig, log_path: str | None) -> None:
    pipeline = Pipeline(config)
    pipeline.on_state(print_state)
    pipeline.on_event(print_event)

    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, lambda: asyncio.ensure_future(pipeline.stop()))

    if log_path is None:
        await pipeline.start()
        return

    with SessionLog(log_path) as log:
        pipeline.on_state(log)
        await pipeline.start()
    print(f"\nLog saved: {log_path} ({log.rows} states)")


def main():
    ap = argparse.ArgumentParser(description="Print live brain state from a Muse 2")
    ap.add_argument("--source", choices=["ble", "relay"], default="ble")
    ap.add_argument("--device", default=MindStateConfig.device_name,
                    help=f"Muse BLE name (default: {MindStateConfig.device_name})")
    ap.add_argument("--relay-url", default=MindStateConfig.relay_url)
    ap.add_argument("--log", default=None, help="CSV file to log every state to")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = MindStateConfig(
        source=args.source, device_name=args.device, relay_url=args.relay_url
    )
    asyncio.run(run(config, args.log))


if __name__ == "__main__":
    main()
