#!/usr/bin/env python3
"""
ReplRepo - Starter template catalog.

Command-line entry point:
  - Serve the web application
  - Search the catalog from the terminal
  - Show the "Most Used Templates" leaderboard
  - Show the effective configuration

Usage:
    python main.py                       # Serve the web app
    python main.py --port 8000           # Serve on another port
    python main.py --search flask        # Print matching templates
    python main.py --type GitHub         # Print GitHub templates only
    python main.py --leaderboard         # Print the leaderboard
    python main.py --show-config         # Print configuration and exit
"""

import argparse
import sys

from replrepo import __version__
from replrepo.catalog import ALL_TYPES, get_leaderboard
from replrepo.config import (
    DEBUG,
    WEB_PORT,
    is_backend_configured,
    print_config_summary,
    validate_config,
)
from replrepo.log import setup_logging
from replrepo.models import PROJECT_TYPES
from replrepo.services import ListingService
from replrepo.storage import SupabaseStorage


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="replrepo",
        description="Browse, search, and serve the ReplRepo template catalog.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                           Serve the web app on the configured port
  %(prog)s --host 0.0.0.0 -p 8000    Serve on all interfaces, port 8000
  %(prog)s --search react            List templates matching "react"
  %(prog)s -s api --type Replit      Search Replit templates only
  %(prog)s --leaderboard             Show the most used templates
  %(prog)s --show-config             Show configuration and exit
        """,
    )

    # Server options
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Interface to bind the web server to (default: 127.0.0.1)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        metavar="N",
        help=f"Port for the web server (default: {WEB_PORT})",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run the web server in debug mode",
    )

    # Catalog options
    parser.add_argument(
        "--search", "-s",
        metavar="QUERY",
        help="Print templates whose name, description, or tags match QUERY",
    )

    parser.add_argument(
        "--type", "-t",
        choices=[ALL_TYPES, *PROJECT_TYPES],
        default=None,
        help="Only show templates of this type (with --search or alone)",
    )

    parser.add_argument(
        "--leaderboard",
        action="store_true",
        help="Print the most used templates and exit",
    )

    # Output options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging",
    )

    # Info options
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show current configuration and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def show_config() -> None:
    """Display current configuration."""
    print("=" * 60)
    print("ReplRepo Configuration")
    print("=" * 60)
    print_config_summary()

    errors = validate_config()
    if errors:
        print("\nConfiguration warnings:")
        for error in errors:
            print(f"  ⚠️  {error}")
    else:
        print("\n✓ Configuration valid")
    print("=" * 60)


def show_leaderboard() -> None:
    """Print the leaderboard table."""
    print("Most Used Templates")
    print("-" * 60)
    for rank, entry in get_leaderboard():
        print(f"  {rank:>2}. {entry.name:<32} {entry.type:<8} {entry.uses:>8,}")


def run_search(query: str, project_type: str = None) -> int:
    """
    Print catalog entries matching the filters.

    Returns:
        Exit code (0 = success, 1 = error).
    """
    if not is_backend_configured():
        print("❌ SUPABASE_URL and SUPABASE_KEY must be set to search the catalog")
        return 1

    listing = ListingService(SupabaseStorage()).load(query=query, project_type=project_type)
    if listing.error:
        print(f"❌ {listing.error}")
        return 1

    print(f"{len(listing.filtered)} of {len(listing.projects)} templates")
    print("-" * 60)
    for project in listing.filtered:
        print(f"  {project}")
        print(f"      {project.url}")
    return 0


def serve(host: str, port: int, debug: bool) -> int:
    """Run the Flask development server."""
    from web.app import app

    errors = validate_config()
    for error in errors:
        print(f"⚠️  {error}")

    print("=" * 50)
    print("ReplRepo")
    print("=" * 50)
    print(f"Open http://{host}:{port} in your browser")
    print("Press Ctrl+C to stop")
    print("=" * 50)
    app.run(host=host, port=port, debug=debug)
    return 0


def main(argv: list = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 = success, 1 = error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else None)

    # Handle --show-config
    if args.show_config:
        show_config()
        return 0

    if args.leaderboard:
        show_leaderboard()
        return 0

    try:
        if args.search is not None or args.type is not None:
            return run_search(args.search or "", args.type)

        return serve(args.host, args.port or WEB_PORT, args.debug or DEBUG)

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
