# =============================================================================
# src/cli/swipe.py - Terminal Swipe Session
# =============================================================================
#
# Runs a complete swipe session in the terminal, without the API server:
#
#   1. Load and shuffle a list export (the bundled default list unless
#      --list is given)
#   2. Show the current anime (title, type, episodes, score)
#   3. Read y / n / q, apply the decision, move on
#   4. Print the liked list when the list runs out or the user quits
#
# Typical usage:
#   python -m src.cli.swipe                          # default list
#   python -m src.cli.swipe --list ~/animelist.xml   # own export
#   python -m src.cli.swipe --seed 42 --json         # reproducible, JSON out
#
# Metadata for the next few entries is prefetched while the prompt waits
# for input, so most cards appear without a loading pause.  Log output
# always goes to stderr; --quiet drops it to WARNING+.
# =============================================================================

"""Interactive terminal front end for an animePicker swipe session.

Usage::

    python -m src.cli.swipe
    python -m src.cli.swipe --list /path/to/animelist.xml --seed 7
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

_ANSWERS = {
    "y": "liked",
    "yes": "liked",
    "n": "disliked",
    "no": "disliked",
}
_QUIT = {"q", "quit", "exit"}
_RETRY = {"r", "retry"}


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_card(view: Any) -> str:  # noqa: ANN401
    """Render the current entry of a ``SessionView`` as a few text lines."""
    lines = [f"[{view.progress_label}]"]
    meta = view.current
    if meta is None:
        title = view.entry.title if view.entry is not None and view.entry.title else "?"
        lines.append(f"  {title}  (no data)")
        return "\n".join(lines)

    lines.append(f"  {meta.title}")
    if meta.alternate_title and meta.alternate_title != meta.title:
        lines.append(f"  ({meta.alternate_title})")
    details = []
    if meta.kind:
        details.append(meta.kind)
    if meta.episode_count:
        details.append(f"{meta.episode_count} eps")
    if meta.score is not None:
        details.append(f"score {meta.score:.2f}")
    if details:
        lines.append("  " + "  |  ".join(details))
    if meta.display_image_url:
        lines.append(f"  {meta.display_image_url}")
    return "\n".join(lines)


def _format_liked(liked: list[Any], json_output: bool) -> str:
    if json_output:
        return json.dumps([m.model_dump(mode="json") for m in liked], indent=2)
    if not liked:
        return "You didn't like anything this time."
    lines = [f"Liked ({len(liked)}):"]
    lines.extend(f"  - {m.title} (#{m.id})" for m in liked)
    return "\n".join(lines)


def _suppress_logs() -> None:
    """Route structlog and stdlib logging to stderr at WARNING+."""
    from src.utils.logging import configure_logging

    configure_logging(log_level="WARNING", stream=sys.stderr)


# ---------------------------------------------------------------------------
# Session loop
# ---------------------------------------------------------------------------


async def _prompt(input_fn: Callable[[str], str], text: str) -> str | None:
    # Reading stdin in a worker thread keeps prefetch tasks running.
    try:
        answer = await asyncio.to_thread(input_fn, text)
    except EOFError:
        return None
    return answer.strip().lower()


async def _run(
    list_path: Path | None,
    *,
    seed: int | None = None,
    json_output: bool = False,
    provider: Any = None,  # noqa: ANN401
    input_fn: Callable[[str], str] = input,
    cooldown: float | None = None,
) -> int:
    """Run one session to completion.  Returns the process exit code."""
    # Deferred imports keep ``--help`` fast.
    import httpx

    from src.config.settings import Settings
    from src.models.session import SessionPhase
    from src.pipeline.session_controller import SessionController
    from src.providers.metadata.jikan_provider import JikanMetadataProvider
    from src.services.enrichment_service import EnrichmentService
    from src.services.list_parser import load_list_file, parse_anime_list, shuffle_entries
    from src.utils.concurrency import RateLimitGate
    from src.utils.errors import ListParseError

    app_settings = Settings()
    path = list_path or Path(app_settings.default_list_path)
    try:
        entries = shuffle_entries(parse_anime_list(load_list_file(path)), seed=seed)
    except ListParseError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    http_client: httpx.AsyncClient | None = None
    if provider is None:
        http_client = httpx.AsyncClient(timeout=app_settings.jikan_timeout)
        provider = JikanMetadataProvider(http_client, base_url=app_settings.jikan_base_url)
    gate = RateLimitGate(min_interval=app_settings.fetch_min_interval)

    controller = SessionController(
        lambda: EnrichmentService(provider=provider, gate=gate),
        prefetch_window=app_settings.prefetch_window,
        decision_cooldown=(
            app_settings.decision_cooldown if cooldown is None else cooldown
        ),
    )

    print(f"Loaded {len(entries)} entries from {path.name}", file=sys.stderr)
    try:
        await controller.load_list(entries, using_default_list=list_path is None)
        while True:
            view = await controller.wait_for_current()
            if view.phase in (SessionPhase.EXHAUSTED, SessionPhase.EMPTY):
                print("End of list.")
                break

            print(_format_card(view))
            if view.phase is SessionPhase.UNAVAILABLE:
                answer = await _prompt(input_fn, "Metadata unavailable. [r]etry / [q]uit: ")
                if answer is None or answer in _QUIT:
                    break
                if answer in _RETRY:
                    await controller.retry_current()
                continue

            answer = await _prompt(input_fn, "Like it? [y/n/q]: ")
            if answer is None or answer in _QUIT:
                break
            decision = _ANSWERS.get(answer)
            if decision is None:
                print("Please answer y, n or q.")
                continue
            if not await controller.decide(decision):
                print("Too fast, try again.")
    finally:
        await controller.aclose()
        if http_client is not None:
            await http_client.aclose()

    print(_format_liked(controller.liked, json_output))
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the swipe CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.swipe",
        description="Swipe through an anime list export one title at a time.",
    )
    parser.add_argument(
        "--list", "-l",
        type=str,
        default=None,
        dest="list_path",
        help="Path to a MyAnimeList XML export (default: the bundled list).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Shuffle seed for a reproducible order.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the liked list as JSON.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the swipe tool."""
    args = _build_parser().parse_args(argv)

    if args.quiet:
        _suppress_logs()
    else:
        from src.utils.logging import configure_logging

        configure_logging(log_level="INFO", stream=sys.stderr)

    list_path = Path(args.list_path).expanduser().resolve() if args.list_path else None
    exit_code = asyncio.run(_run(list_path, seed=args.seed, json_output=args.json_output))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
