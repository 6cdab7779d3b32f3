#!/usr/bin/env python3
"""Plot a brain state session from a CSV log.

Usage:
    python scripts/plot_session.py                      # latest session
    python scripts/plot_session.py output/session.csv   # specific file
"""

import glob
import sys

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from mindstate.eeg.bands import ALL_BANDS


def plot_session(csv_path: str):
    df = pd.read_csv(csv_path)
    if df.empty:
        print(f"  No states in {csv_path}, nothing to plot")
        return None
    t = df["time_s"].values

    fig, axes = plt.subplots(3, 1, figsize=(14, 9), sharex=True)
    fig.suptitle(f"Brain State Session — {csv_path}", fontsize=13, fontweight="bold")

    # Shade the calibration window on every panel
    cal = df["calibrating"].values.astype(bool)
    cal_end = t[~cal][0] if (~cal).any() else t[-1]

    # 1. Relative band powers
    ax = axes[0]
    ax.stackplot(
        t, *[df[b.name].values for b in ALL_BANDS],
        labels=[f"{b.name} ({b.low:g}-{b.high:g} Hz)" for b in ALL_BANDS],
        colors=[b.color for b in ALL_BANDS], alpha=0.8,
    )
    ax.set_ylabel("Relative power")
    ax.set_ylim(0, 1)
    ax.legend(loc="upper right", fontsize=8)
    ax.set_title("Band Powers")

    # 2. Focus and calm
    ax = axes[1]
    ax.plot(t, df["focus"].values, color="orange", linewidth=2, label="Focus")
    ax.plot(t, df["calm"].values, color="teal", linewidth=2, label="Calm")
    focused = df["focused"].values.astype(bool)
    ax.fill_between(t, 0, 1, where=focused, color="orange", alpha=0.1, label="Focused")
    ax.set_ylabel("Score (0-1)")
    ax.set_ylim(-0.05, 1.05)
    ax.legend(loc="upper right", fontsize=8)
    ax.set_title("Scores")
    ax.grid(True, alpha=0.3)

    # 3. Cumulative artifacts
    ax = axes[2]
    ax.step(t, df["blinks"].values, where="post", color="royalblue", linewidth=2, label="Blinks")
    ax.step(t, df["clenches"].values, where="post", color="crimson", linewidth=2, label="Clenches")
    ax.set_ylabel("Count")
    ax.set_xlabel("Time (seconds)")
    ax.legend(loc="upper left", fontsize=8)
    ax.set_title("Blinks and Jaw Clenches")
    ax.grid(True, alpha=0.3)

    for ax in axes:
        ax.axvspan(t[0], cal_end, color="gray", alpha=0.15)

    plt.tight_layout()

    out_path = csv_path.replace(".csv", ".png")
    plt.savefig(out_path, dpi=150)
    print(f"  Saved: {out_path}")
    print(f"  {len(t)} states, {int(np.max(df['blinks']))} blinks, "
          f"{int(np.max(df['clenches']))} clenches")
    plt.close()
    return out_path


def main():
    if len(sys.argv) > 1:
        csv_path = sys.argv[1]
    else:
        files = sorted(glob.glob("output/*.csv"))
        if not files:
            print("No session CSV found in output/")
            return
        csv_path = files[-1]

    print(f"Plotting: {csv_path}")
    plot_session(csv_path)


if __name__ == "__main__":
    main()
