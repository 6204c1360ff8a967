"""CLI command implementations.

Each module exposes a ``run_*`` function that does the work and reports
through the consoles it is given; :mod:`release_boss.cli.app` only maps
options onto those calls.
"""
