"""Command line interface for PackAdvice."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from packadvice.config import APP_NAME, APP_VERSION, DEFAULT_PROFILE
from packadvice.core.adviser import PackAdviser, PackOptions
from packadvice.core.errors import PackAdviserError
from packadvice.core.export import build_result_dict, write_result_json
from packadvice.core.profiles import AuditProfile, load_profile, load_profile_file
from packadvice.core.reporting import build_report_html, write_report_html
from packadvice.logging import configure_logging
from packadvice.models import ERROR, NOTICE, WARNING, PackAdviserStatus

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_STRICT = 3


def platform_supports_emoji() -> bool:
    # Many Linux terminals render UTF-8 fine but have no emoji font
    if sys.platform == "win32":
        return "WT_SESSION" in os.environ
    return sys.platform == "darwin"


class Emoji:
    def __init__(self, emoji: str, fallback: str):
        self.emoji = emoji
        self.fallback = fallback

    def render(self, enabled: bool) -> str:
        return self.emoji if enabled else self.fallback


_SEVERITY_STYLE = {
    NOTICE: (Emoji("ℹ️ ", "i"), "cyan"),
    WARNING: (Emoji("⚠️ ", "!"), "yellow"),
    ERROR: (Emoji("❌", "x"), "bold red"),
}
_SEARCH = Emoji("🔍", ">")
_DONE = Emoji("✨", "*")


def _print_status(console: Console, status: PackAdviserStatus, use_emoji: bool) -> None:
    icon, style = _SEVERITY_STYLE.get(status.severity, _SEVERITY_STYLE[NOTICE])
    console.print(
        f"{icon.render(use_emoji)} [{style}]{escape(status.message)}[/{style}] "
        f"[dim]{escape(status.path)}[/dim]"
    )


def _resolve_profile(args: argparse.Namespace) -> AuditProfile:
    if args.profile_file:
        return load_profile_file(str(args.profile_file))
    return load_profile(args.profile)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="packadvice",
        description="Find unused textures, unreferenced models and #missing textures in a resource pack",
    )
    p.add_argument("path", type=Path, help="Resource pack directory")
    p.add_argument(
        "-p",
        "--profile",
        default=DEFAULT_PROFILE,
        help=(
            "Audit profile name (Default, Strict, Legacy or a saved profile). "
            "Default leaves textures the game reads outside of models (font/, gui/, entity/, ...) "
            "out of the unused-texture check; Strict audits every texture"
        ),
    )
    p.add_argument(
        "--profile-file",
        dest="profile_file",
        type=Path,
        help="Load the audit profile from a JSON file instead",
    )
    p.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON on stdout instead of status lines",
    )
    p.add_argument(
        "--json-out",
        dest="json_out",
        type=Path,
        help="Also write the JSON result to this path",
    )
    p.add_argument(
        "--report",
        type=Path,
        help="Also write an HTML report to this path",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help=f"Exit with {EXIT_STRICT} when any warning or error was reported",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeatable)",
    )
    p.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    console = Console(highlight=False)
    use_emoji = platform_supports_emoji() and console.is_terminal

    try:
        profile = _resolve_profile(args)
    except (OSError, ValueError) as e:
        console.print(f"[bold red]Cannot load profile:[/bold red] {escape(str(e))}")
        return EXIT_FAILED

    if not args.json:
        console.print(f"{_SEARCH.render(use_emoji)} Analyzing [bold]{escape(str(args.path))}[/bold]")

    def on_status(status: PackAdviserStatus) -> None:
        if not args.json:
            _print_status(console, status, use_emoji)

    try:
        result = PackAdviser().run(PackOptions(path=str(args.path), profile=profile), on_status)
    except PackAdviserError as e:
        console.print(f"[bold red]Error ({e.phase}):[/bold red] {escape(str(e))}")
        return EXIT_FAILED

    if args.json:
        sys.stdout.write(json.dumps(build_result_dict(result, profile=profile.name), indent=2) + "\n")
    else:
        c = result.counts()
        console.print(
            f"{_DONE.render(use_emoji)} Done: "
            f"{c['unreferenced_textures']} unused texture(s), "
            f"{c['unreferenced_models']} unreferenced model(s), "
            f"{c['missing_texture_models']} model(s) with #missing, "
            f"{c['load_issues']} load issue(s)"
        )

    try:
        written = []
        if args.json_out:
            written.append(write_result_json(build_result_dict(result, profile=profile.name), str(args.json_out)))
        if args.report:
            written.append(write_report_html(build_report_html(result, profile=profile.name), str(args.report)))
    except OSError as e:
        console.print(f"[bold red]Export failed:[/bold red] {escape(str(e))}")
        return EXIT_FAILED
    if not args.json:
        for path in written:
            console.print(f"Written: {escape(path)}")

    if args.strict and any(s.severity in (WARNING, ERROR) for s in result.statuses):
        return EXIT_STRICT
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
