# =============================================================================
# src/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Command-line entry points for animePicker.  The CLI runs a swipe session
# directly in the terminal, building its own providers rather than going
# through the API server:
#
#   SWIPE (swipe.py)
#      Loads a list export, shows one anime at a time, reads y/n/q and
#      prints the liked list at the end.
#
# Architecture Notes:
#   - argparse for argument parsing.
#   - Heavy imports (httpx, providers, services) are deferred inside
#     functions to keep ``--help`` fast.
# =============================================================================

"""CLI tools for animePicker.

- ``python -m src.cli`` / ``python -m src.cli.swipe`` - interactive swipe
  session in the terminal.
"""
