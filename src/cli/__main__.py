# =============================================================================
# src/cli/__main__.py - Package Entry Point
# =============================================================================
#
# Enables running the CLI package itself as a module:
#     python -m src.cli
#
# Delegates to the swipe session, the only CLI command.
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.swipe import main

main()
