#!/usr/bin/env python3
"""Launcher installed at <openpilot>/scripts/fork_swap.py on the device.

Every fork carries a copy of this file; the code it runs is the installed
`forkswap` package. Self-update upgrades that package from the reference
repository, replaces this file, and re-executes it with the same interpreter.
"""

from forkswap.cli.cli import main

if __name__ == "__main__":
    main()
