"""Interactive CPU scheduler simulation.

Asks for a scheduling algorithm, then for a number of processes, and
prints randomly generated burst times and scheduling results.
"""

from __future__ import annotations

import random
import sys
from typing import TextIO

ALGORITHMS = ["FCFS", "SJF", "Priority", "Round Robin"]


def respond(line: str, rng: random.Random, out: TextIO) -> None:
    """Print the reply to one line of user input."""
    choice = line.strip()
    if choice in ("1", "2", "3", "4"):
        print("Selected:", ALGORITHMS[int(choice) - 1], file=out)
        print("Enter number of processes (1-10): ", file=out)
    elif choice.isdigit():
        count = int(choice)
        if 1 <= count <= 10:
            print("Creating", count, "processes...", file=out)
            print("Process Details:", file=out)
            for i in range(1, count + 1):
                burst = rng.randint(1, 10)
                priority = rng.randint(1, 5)
                print(f"  P{i}: Burst={burst}ms, Priority={priority}", file=out)
            print("Executing scheduling algorithm...", file=out)
            print("Scheduling Results:", file=out)
            print(f"  Average Waiting Time: {rng.uniform(5, 25):.1f}ms", file=out)
            print(f"  Average Turnaround Time: {rng.uniform(15, 45):.1f}ms", file=out)
            print(f"  CPU Utilization: {rng.uniform(80, 100):.1f}%", file=out)
            print('Simulation complete. Type "run" to start again.', file=out)
        else:
            print("Please enter a number between 1-10", file=out)
    else:
        print("Invalid input. Please enter 1-4 for algorithm or 1-10 for processes.", file=out)


def main(stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
    rng = random.Random()
    print("=== CPU Scheduler Simulation ===", file=stdout)
    print("Select scheduling algorithm:", file=stdout)
    print("1. First Come First Serve (FCFS)", file=stdout)
    print("2. Shortest Job First (SJF)", file=stdout)
    print("3. Priority Scheduling", file=stdout)
    print("4. Round Robin", file=stdout)
    print("Enter choice (1-4): ", file=stdout)
    stdout.flush()
    for line in stdin:
        respond(line, rng, stdout)
        stdout.flush()


if __name__ == "__main__":
    main()
