#!/usr/bin/env python3
"""CLI entry point for nuver."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .config import LOG_LEVELS, Settings, load_settings
from .errors import PackageSpecError, RegistryError, SemverError
from .fetchers import NuGetClient
from .models import CatalogEntry, SearchQuery
from .package_spec import PackageSpec
from .picker import VersionPicker
from .range import Range
from .version import Version

logger = logging.getLogger(__name__)


# ANSI color codes for terminal output
class Colors:
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'
    END = '\033[0m'

    @classmethod
    def disable(cls):
        """Disable colors (for non-TTY output)."""
        cls.BLUE = ''
        cls.CYAN = ''
        cls.GREEN = ''
        cls.YELLOW = ''
        cls.RED = ''
        cls.BOLD = ''
        cls.UNDERLINE = ''
        cls.END = ''


def supports_color() -> bool:
    """Check if the terminal supports color output."""
    if not hasattr(sys.stdout, 'isatty'):
        return False
    if not sys.stdout.isatty():
        return False
    return True


def print_success(message: str):
    print(f"{Colors.GREEN}✓ {message}{Colors.END}")


def print_warning(message: str):
    print(f"{Colors.YELLOW}⚠ {message}{Colors.END}", file=sys.stderr)


def print_error(message: str):
    print(f"{Colors.RED}✗ {message}{Colors.END}", file=sys.stderr)


def print_info(message: str):
    print(f"{Colors.CYAN}ℹ {message}{Colors.END}")


def print_json(data: Any):
    print(json.dumps(data, indent=2))


def print_parse_error(error: ValueError):
    """Show a parse error with a caret under the offending character."""
    print_error(f"Invalid input: {error}")
    line_no, column = error.location()
    line = error.input.split("\n")[line_no] if error.input else ""
    print(f"    {line}", file=sys.stderr)
    print(f"    {' ' * column}{Colors.RED}^{Colors.END}", file=sys.stderr)
    print(f"  {Colors.BOLD}code:{Colors.END} {error.code}", file=sys.stderr)
    help_text = getattr(error, "help", None)
    if help_text:
        print(f"  {Colors.BOLD}help:{Colors.END} {help_text}", file=sys.stderr)


def print_registry_error(error: RegistryError):
    print_error(str(error))
    print(f"  {Colors.BOLD}code:{Colors.END} {error.code}", file=sys.stderr)
    if error.help:
        print(f"  {Colors.BOLD}help:{Colors.END} {error.help}", file=sys.stderr)


class ColoredHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter that adds color to help output."""

    def __init__(self, prog, indent_increment=2, max_help_position=30, width=None):
        super().__init__(prog, indent_increment, max_help_position, width)

    def _format_action_invocation(self, action):
        if not action.option_strings:
            return super()._format_action_invocation(action)
        return f"{Colors.GREEN}{', '.join(action.option_strings)}{Colors.END}"

    def _format_usage(self, usage, actions, groups, prefix):
        if prefix is None:
            prefix = f'{Colors.BOLD}Usage: {Colors.END}'
        return super()._format_usage(usage, actions, groups, prefix)


EPILOG = """
{b}Examples:{e}

  {c}# Check that the default source answers{e}
  %(prog)s ping

  {c}# List every version of a package, marking those matching a range{e}
  %(prog)s versions Newtonsoft.Json --range "[12.0,13.0)"

  {c}# Show details for the newest 13.x release{e}
  %(prog)s view Newtonsoft.Json@13.*

  {c}# Check versions against a range without touching the network{e}
  %(prog)s satisfies "^1.2.3" 1.2.0 1.4.7 2.0.0

{b}Range syntax:{e}
  1.2.3  =1.2.3  >=1.2  <2  >=1.2 <1.5  ^1.2.3  ~1.2  1.2.x  1.2 - 2.0  [1.0,2.0)  (,1.0]
  Join alternatives with ||.
"""


def create_parser() -> argparse.ArgumentParser:
    color = supports_color() and Colors.END != ''
    formatter_class = ColoredHelpFormatter if color else argparse.RawDescriptionHelpFormatter

    def heading(title: str) -> str:
        return f'{Colors.BOLD}{title}{Colors.END}' if color else title

    parser = argparse.ArgumentParser(
        prog="nuver",
        description=heading("Query NuGet sources and evaluate version ranges"),
        formatter_class=formatter_class,
        epilog=EPILOG.format(b=Colors.BOLD, c=Colors.CYAN, e=Colors.END),
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    source_group = parser.add_argument_group(heading("Source"))
    source_group.add_argument(
        "--source", "-s",
        metavar="URL",
        help="NuGet v3 service index to talk to (default: nuget.org)",
    )

    config_group = parser.add_argument_group(heading("Configuration"))
    config_group.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="Config file to use instead of ~/.config/nuver/nuverrc.toml",
    )
    config_group.add_argument(
        "--root",
        type=Path,
        metavar="DIR",
        default=Path.cwd(),
        help="Directory to read project nuverrc files from (default: current directory)",
    )

    output_group = parser.add_argument_group(heading("Output Options"))
    output_group.add_argument(
        "--loglevel",
        choices=list(LOG_LEVELS),
        help="Log level (default: warning)",
    )
    output_group.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    output_group.add_argument(
        "--quiet", "-q",
        action="store_true",
        default=None,
        help="Suppress non-essential output",
    )
    output_group.add_argument(
        "--json",
        action="store_true",
        default=None,
        help="Print machine-readable JSON",
    )
    output_group.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    subparsers.add_parser("ping", help="Ping the source and report the round-trip time")

    search = subparsers.add_parser("search", help="Search the source for packages")
    search.add_argument("query", help="Search terms")
    search.add_argument("--skip", type=int, metavar="N", help="Number of results to skip")
    search.add_argument("--take", type=int, metavar="N", help="Number of results to return")
    search.add_argument("--prerelease", action="store_true", default=None, help="Include pre-release packages")
    search.add_argument("--package-type", metavar="TYPE", help="Only return packages of this type")

    versions = subparsers.add_parser("versions", help="List every version of a package")
    versions.add_argument("package", help="Package id")
    versions.add_argument("--range", "-r", dest="range", metavar="RANGE", help="Mark versions matching this range")

    view = subparsers.add_parser("view", help="Show details for the version a package spec resolves to")
    view.add_argument("spec", metavar="PACKAGE_SPEC", help="e.g. Newtonsoft.Json@^13")

    resolve = subparsers.add_parser("resolve", help="Print the version a package spec resolves to")
    resolve.add_argument("spec", metavar="PACKAGE_SPEC", help="e.g. Newtonsoft.Json@[12.0,13.0)")

    satisfies = subparsers.add_parser("satisfies", help="Check versions against a range (offline)")
    satisfies.add_argument("range", metavar="RANGE", help="Version range")
    satisfies.add_argument("versions", metavar="VERSION", nargs="+", help="Versions to check")

    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "source": args.source,
        "loglevel": args.loglevel,
        "quiet": args.quiet,
        "json": args.json,
        "color": False if args.no_color else None,
    }
    return load_settings(config_file=args.config, root=args.root, overrides=overrides)


def create_client(settings: Settings) -> NuGetClient:
    return NuGetClient.from_source(settings.source, timeout=settings.timeout)


def format_published(entry: CatalogEntry) -> str:
    if not entry.is_listed or entry.published is None:
        return "unlisted"
    return entry.published.strftime("%Y-%m-%d %H:%M")


def cmd_ping(args: argparse.Namespace, settings: Settings) -> int:
    if not settings.quiet and not settings.json:
        print_info(f"ping: {settings.source}")
    with create_client(settings) as client:
        elapsed = client.ping()
    millis = round(elapsed * 1000, 3)
    if settings.json:
        print_json({"source": settings.source, "time": millis})
    elif not settings.quiet:
        print_success(f"pong: {millis}ms")
    return 0


def cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    query = SearchQuery(
        query=args.query,
        skip=args.skip,
        take=args.take,
        prerelease=args.prerelease,
        package_type=args.package_type,
    )
    with create_client(settings) as client:
        response = client.search(query)

    if settings.json:
        print_json(response.to_dict())
        return 0
    if settings.quiet:
        return 0

    print(f"\n{Colors.BOLD}{response.total_hits} packages found:{Colors.END}\n")
    for result in response.data:
        verified = f" {Colors.GREEN}✓{Colors.END}" if result.verified else ""
        print(f"  {Colors.GREEN}{result.id}{Colors.END}@{result.version}{verified}")
        if result.description:
            print(f"    {result.description.strip().splitlines()[0]}")
    print()
    return 0


def cmd_versions(args: argparse.Namespace, settings: Settings) -> int:
    range_ = Range.parse(args.range) if args.range else None
    with create_client(settings) as client:
        entries = client.catalog_entries(args.package)

    picked: Optional[Version] = None
    if range_ is not None:
        picked = VersionPicker().pick(range_, [entry.version for entry in entries])

    if settings.json:
        rows = []
        for entry in entries:
            row: Dict[str, Any] = {
                "version": str(entry.version),
                "published": entry.published.isoformat() if entry.published else None,
                "listed": entry.is_listed,
            }
            if range_ is not None:
                row["satisfies"] = range_.satisfies(entry.version)
                row["picked"] = entry.version == picked
            rows.append(row)
        print_json(rows)
        return 0
    if settings.quiet:
        return 0

    print(f"\n{Colors.BOLD}{args.package} versions ({len(entries)} total):{Colors.END}\n")
    for entry in entries:
        marker = "  "
        if range_ is not None and entry.version == picked:
            marker = f"{Colors.GREEN}=>{Colors.END}"
        elif range_ is not None and range_.satisfies(entry.version):
            marker = f"{Colors.CYAN} *{Colors.END}"
        print(f"  {marker} {str(entry.version):<30} {format_published(entry)}")
    if range_ is not None:
        print()
        if picked is None:
            print_warning(f"No version satisfies {range_}")
        else:
            print_info(f"{range_} resolves to {picked}")
    print()
    return 0


def print_entry(entry: CatalogEntry):
    c = Colors
    license_name = entry.license_expression or f"{c.RED}No License{c.END}"
    print(f"{c.GREEN}{c.UNDERLINE}{entry.id}@{entry.version}{c.END} | {license_name}")
    if entry.description:
        print(entry.description)
    if entry.project_url:
        print(f"{c.CYAN}{entry.project_url}{c.END}")
    if entry.authors:
        print(f"Authors: {', '.join(entry.authors)}")
    if entry.tags:
        print(f"Tags: {', '.join(f'{c.YELLOW}{tag}{c.END}' for tag in entry.tags)}")

    for group in entry.dependency_groups:
        if not group.dependencies:
            continue
        print(f"\nDependencies for {c.CYAN}{group.target_framework or 'this package'}{c.END}:")
        for dep in group.dependencies:
            print(f"  {dep.id} {c.YELLOW}{dep.range if dep.range is not None else '*'}{c.END}")

    print(f"\nPublished: {format_published(entry)}")


def cmd_view(args: argparse.Namespace, settings: Settings) -> int:
    spec = PackageSpec.parse(args.spec)
    with create_client(settings) as client:
        entry = client.resolve_entry(spec)

    if settings.json:
        print_json(entry.to_dict())
    elif not settings.quiet:
        print_entry(entry)
    return 0


def cmd_resolve(args: argparse.Namespace, settings: Settings) -> int:
    spec = PackageSpec.parse(args.spec)
    with create_client(settings) as client:
        version = client.resolve(spec)

    if settings.json:
        print_json({"id": spec.name, "version": str(version)})
    else:
        print(version)
    return 0


def cmd_satisfies(args: argparse.Namespace, settings: Settings) -> int:
    range_ = Range.parse(args.range)
    versions: List[Version] = [Version.parse(v) for v in args.versions]
    matching = [v for v in versions if range_.satisfies(v)]
    picked = VersionPicker().pick(range_, versions)

    if settings.json:
        print_json({
            "range": str(range_),
            "satisfying": [str(v) for v in matching],
            "picked": str(picked) if picked is not None else None,
        })
    elif not settings.quiet:
        for version in versions:
            if version in matching:
                print(f"{Colors.GREEN}✓{Colors.END} {version}")
            else:
                print(f"{Colors.RED}✗{Colors.END} {version}")
        if picked is not None:
            print_info(f"{range_} resolves to {picked}")
    return 0 if matching else 1


COMMANDS = {
    "ping": cmd_ping,
    "search": cmd_search,
    "versions": cmd_versions,
    "view": cmd_view,
    "resolve": cmd_resolve,
    "satisfies": cmd_satisfies,
}


def configure_logging(settings: Settings, verbose: bool):
    if settings.quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    else:
        log_level = settings.log_level

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    # Pre-parse to check for --no-color before creating parser
    if '--no-color' in argv or not supports_color():
        Colors.disable()

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        print_error(f"Invalid configuration: {e}")
        return 1
    if not settings.color:
        Colors.disable()

    configure_logging(settings, args.verbose)
    logger.debug(f"Running '{args.command}' against {settings.source}")

    try:
        return COMMANDS[args.command](args, settings)
    except (SemverError, PackageSpecError) as e:
        print_parse_error(e)
        return 1
    except RegistryError as e:
        print_registry_error(e)
        return 1
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return 1
    except KeyboardInterrupt:
        print()
        print_warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print_error(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
