# =============================================================================
# src/cli/discover.py — CLI Discover Command
# =============================================================================
#
# Runs one discovery request against the engine from the command line:
#
#   python -m src.cli.discover --industry fitness --kind influencers --limit 6
#   python -m src.cli.discover --name "Acme Gym" --industry fitness \
#       --kind competitors --competitor "Peak Fitness" --json
#   python -m src.cli.discover --industry bakery --kind campaigns --stream
#   python -m src.cli.discover --industry fitness --kind influencers --invalidate
#
# Output modes:
#   - Text (default): numbered list of ranked artifacts plus any errors
#   - JSON (--json): DiscoveryResult as JSON, or one SSE frame per event
#     with --stream
#
# Provider keys come from the environment / .env (see .env.example); with
# no keys at all the engine still runs on DuckDuckGo search alone.
# =============================================================================

"""Standalone CLI for the Gravity discovery engine.

Usage::

    python -m src.cli.discover --industry fitness --kind influencers --limit 6
    python -m src.cli.discover --industry fitness --kind campaigns --stream
    python -m src.cli.discover --industry fitness --kind influencers --invalidate
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from src.models.business import BusinessContext
from src.models.cache import ArtifactKind
from src.models.discovery import DiscoveryResult, StreamEvent, StreamEventType


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_artifact(index: int, kind: ArtifactKind, artifact: dict[str, Any]) -> str:
    if kind is ArtifactKind.CAMPAIGNS:
        platforms = ", ".join(artifact.get("platforms") or [])
        line = f"{index + 1:>2}. {artifact.get('name', '')}  [{artifact.get('objective', '')}]"
        if platforms:
            line += f"  |  {platforms}"
        tagline = artifact.get("tagline")
        return f"{line}\n      {tagline}" if tagline else line

    candidate = artifact.get("candidate", {})
    relevance = artifact.get("relevance", {})
    return (
        f"{index + 1:>2}. [{candidate.get('platform', '?')}] @{candidate.get('handle', '')}"
        f"  |  score {relevance.get('score', 0)} ({relevance.get('source', '')})"
        f"  |  {candidate.get('audience_size', 0):,} followers"
        f"  |  {artifact.get('audience_tier', '')}"
    )


def _format_text_output(result: DiscoveryResult) -> str:
    """Human-readable report for a :class:`DiscoveryResult`."""
    sep = "=" * 60
    lines = [
        sep,
        f"  Gravity — {result.kind.value.title()}",
        sep,
        f"Fingerprint: {result.fingerprint}  |  Cached: {'yes' if result.cached else 'no'}",
    ]
    if result.search_keywords:
        lines.append(f"Keywords: {', '.join(result.search_keywords)}")
    lines.append("")

    if result.artifacts:
        for i, artifact in enumerate(result.artifacts):
            lines.append(_format_artifact(i, result.kind, artifact))
    else:
        lines.append("  No results.")

    if result.errors:
        lines.append("")
        lines.append("ERRORS")
        lines.append("-" * 40)
        for error in result.errors:
            lines.append(f"  ! {error}")
    return "\n".join(lines)


def _format_event(event: StreamEvent, kind: ArtifactKind) -> str:
    if event.type is StreamEventType.START:
        return f"start: {event.total} expected{' (cached)' if event.cached else ''}"
    if event.type is StreamEventType.ITEM:
        return _format_artifact(event.index or 0, kind, event.item or {})
    if event.type is StreamEventType.ITEM_ERROR:
        return f"{(event.index or 0) + 1:>2}. failed: {event.message}"
    return f"complete: {event.total} delivered"


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def _context_from_args(args: argparse.Namespace) -> BusinessContext:
    return BusinessContext(
        name=args.name,
        industry=args.industry,
        niche=args.niche,
        description=args.description,
        target_audience=args.audience,
        brand_voice=args.voice,
        region=args.region,
        country=args.country,
        city=args.city,
        marketing_goals=args.goal or [],
        competitors=args.competitor or [],
    )


async def _run(args: argparse.Namespace) -> int:
    """Build the engine, run the requested operation and print the outcome.

    Returns 0 on success, 1 on a configuration error.
    """
    # Deferred import: building providers pulls in the vendor SDKs.
    from src.main import build_engine
    from src.utils.errors import ConfigurationError

    context = _context_from_args(args)
    kind = ArtifactKind(args.kind)

    try:
        components = await build_engine()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    engine = components["engine"]
    try:
        if args.invalidate:
            demoted = await engine.invalidate(context, kind, owner_id=args.owner)
            print(f"Invalidated {demoted} cached {kind.value} entr{'y' if demoted == 1 else 'ies'}.")
            return 0

        if args.history:
            entries = await engine.history(context, kind, owner_id=args.owner)
            if args.json_output:
                print(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
            else:
                for entry in entries:
                    print(
                        f"{entry.generated_at.isoformat()}  {entry.status.value:<7}  "
                        f"{len(entry.artifacts)} artifacts  {entry.entry_id}"
                    )
            return 0

        if args.stream:
            async for event in engine.stream(
                context,
                kind,
                args.limit,
                force_refresh=args.refresh,
                owner_id=args.owner,
                platforms=args.platform,
            ):
                if args.json_output:
                    sys.stdout.write(event.to_sse())
                else:
                    print(_format_event(event, kind))
                sys.stdout.flush()
            return 0

        result = await engine.discover(
            context,
            kind,
            args.limit or components["config"].default_stream_count,
            force_refresh=args.refresh,
            owner_id=args.owner,
            platforms=args.platform,
        )
        if args.json_output:
            print(json.dumps(result.model_dump(mode="json"), indent=2, default=str))
        else:
            print(_format_text_output(result))
        return 0
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await components["http_client"].aclose()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the discover CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.discover",
        description=(
            "Discover influencers, competitors or campaign ideas for a business. "
            "Results are cached per business profile."
        ),
    )

    business = parser.add_argument_group("business profile")
    business.add_argument("--name", default="", help="Business name.")
    business.add_argument("--industry", default="", help="Industry, e.g. fitness.")
    business.add_argument("--niche", default="", help="Niche within the industry.")
    business.add_argument("--description", default="", help="Short business description.")
    business.add_argument("--audience", default="", help="Target audience description.")
    business.add_argument("--voice", default="", help="Brand voice, e.g. playful.")
    business.add_argument("--region", default="")
    business.add_argument("--country", default="")
    business.add_argument("--city", default="")
    business.add_argument("--goal", action="append", help="Marketing goal (repeatable).")
    business.add_argument("--competitor", action="append", help="Known competitor (repeatable).")

    parser.add_argument(
        "--kind",
        choices=[k.value for k in ArtifactKind],
        default=ArtifactKind.INFLUENCERS.value,
        help="What to discover (default: influencers).",
    )
    parser.add_argument("--limit", type=int, default=None, help="Maximum results (default: 6).")
    parser.add_argument(
        "--platform",
        action="append",
        help="Platform to search (repeatable). Defaults to the configured set.",
    )
    parser.add_argument("--owner", default="default", help="Cache partition (default: default).")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--stream", action="store_true", help="Print results as they arrive.")
    mode.add_argument("--invalidate", action="store_true", help="Drop cached results and exit.")
    mode.add_argument("--history", action="store_true", help="List cache entries, stale included.")

    parser.add_argument("--refresh", action="store_true", help="Ignore cached results.")
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output JSON (SSE frames with --stream).",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse arguments, configure logging, run, exit."""
    from src.config.settings import Settings
    from src.utils.logging import configure_logging

    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = Settings()
    quiet = args.quiet or args.json_output
    configure_logging(
        log_level="WARNING" if quiet else settings.log_level,
        json_output=settings.app_env == "production",
    )

    exit_code = asyncio.run(_run(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
