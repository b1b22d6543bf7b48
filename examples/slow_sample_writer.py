"""
Slow collector output writer for testing SSE real-time updates.

Simulates executors reporting flat registry metrics once per tick, folds
them into samples with SampleAssembler and appends them to the data
directory the way the file reporter does.

Usage:
    # Terminal 1: Start dashboard
    stagescope serve --data-dir /tmp/stagescope

    # Terminal 2: Run this script
    uv run python examples/slow_sample_writer.py --data-dir /tmp/stagescope

    # Terminal 3 (optional): Stream the CPU chart
    curl -N "http://localhost:3151/api/apps/app-sse-test-0001/stream?path=sigar.cpu.combined"
"""

import argparse
import json
import math
import random
import time
from datetime import datetime
from pathlib import Path

from stagescope.collector import SampleAssembler


def write_sample(app_dir: Path, sample) -> None:
    with (app_dir / f"{sample.host}.json").open("a") as f:
        f.write(sample.model_dump_json() + "\n")


def main():
    parser = argparse.ArgumentParser(description="Slow sample writer for SSE testing")
    parser.add_argument("--data-dir", default="/tmp/stagescope", help="Data directory")
    parser.add_argument("--app", default="app-sse-test-0001", help="Application id")
    parser.add_argument("--hosts", type=int, default=2, help="Number of hosts")
    parser.add_argument("--executors", type=int, default=2, help="Executors per host")
    parser.add_argument("--ticks", type=int, default=30, help="Number of reporting ticks")
    parser.add_argument("--delay", type=float, default=2.0, help="Delay between ticks (seconds)")
    args = parser.parse_args()

    app_dir = Path(args.data_dir) / args.app
    app_dir.mkdir(parents=True, exist_ok=True)

    start_millis = int(time.time() * 1000)
    timeline = {
        "jobs": [{"name": "job 0", "submitted": start_millis}],
        "stages": [{"name": "stage 0", "submitted": start_millis + 100}],
    }
    (app_dir / "_timeline.json").write_text(json.dumps(timeline))

    assemblers = {}
    for host in range(args.hosts):
        for executor in range(args.executors):
            assemblers[(host, executor)] = SampleAssembler(f"node{host + 1}")

    print(f"Writing samples to {app_dir}")
    print(f"   Executors: {len(assemblers)}, Ticks: {args.ticks}, Delay: {args.delay}s\n")

    rx_bytes = {key: 0 for key in assemblers}
    for tick in range(args.ticks):
        now = int(time.time())
        for (host, executor), assembler in assemblers.items():
            prefix = f"{args.app}.{executor}.executor"
            cpu = min(1.0, max(0.0, 0.5 + 0.4 * math.sin(tick * 0.3 + host) + random.gauss(0, 0.05)))
            rx_bytes[(host, executor)] += random.randint(1_000, 50_000)

            for name, value in [
                ("sigar.cpu.combined", cpu),
                ("sigar.network.rxBytes", rx_bytes[(host, executor)]),
                ("jvm.heap.used", random.randint(100, 500) * 1024 * 1024),
            ]:
                completed = assembler.record(now, f"{prefix}.{name}", value)
                if completed is not None:
                    write_sample(app_dir, completed)

        timestamp = datetime.now().strftime("%H:%M:%S")
        print(f"[{timestamp}] Tick {tick:3d}/{args.ticks}")
        time.sleep(args.delay)

    for assembler in assemblers.values():
        sample = assembler.flush()
        if sample is not None:
            write_sample(app_dir, sample)

    print(f"\nCompleted! Total time: {args.ticks * args.delay:.1f}s")


if __name__ == "__main__":
    main()
