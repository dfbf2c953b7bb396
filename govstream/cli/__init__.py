"""GovStream CLI.

Provides command-line interface for operating governed logging, including:
- Starting the demo server
- Rotating sink files
- Decoding the encoded fallback file
- Inspecting the governance profile
"""

import argparse
import sys

from .. import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="govstream",
        description="GovStream - governed structured logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command (default behavior)
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the demo server",
        description="Start the FastAPI demo emitting governed log events",
    )
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Host to bind to (default: from settings)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind to (default: from settings)",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )

    # rotate command
    rotate_parser = subparsers.add_parser(
        "rotate",
        help="Rotate sink files exceeding size/age thresholds",
    )
    rotate_parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Settings file (YAML/JSON, 'govstream' section)",
    )
    rotate_parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output as JSON",
    )

    # decode command
    decode_parser = subparsers.add_parser(
        "decode",
        help="Decode an encoded fallback file to JSON lines",
    )
    decode_parser.add_argument(
        "path",
        help="Fallback file to decode",
    )
    decode_parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Skip lines that are not encoded records",
    )

    # profile command
    profile_parser = subparsers.add_parser(
        "profile",
        help="Show the governance profile that would be loaded",
    )
    profile_parser.add_argument(
        "governance_path",
        nargs="?",
        default=None,
        help="Governance document (default: from settings)",
    )
    profile_parser.add_argument(
        "--name",
        dest="profile_name",
        default=None,
        help="Profile name (default: from settings)",
    )
    profile_parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Settings file (YAML/JSON, 'govstream' section)",
    )
    profile_parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output as JSON",
    )

    return parser


def run_serve(args: argparse.Namespace) -> int:
    """Run the server command."""
    from ..main import run as run_server

    run_server(host=args.host, port=args.port, reload=args.reload)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    from .commands import cmd_decode, cmd_profile, cmd_rotate

    parser = create_parser()
    args = parser.parse_args(argv)

    # Default to serve if no command given
    if args.command is None:
        args.command = "serve"
        args.host = None
        args.port = None
        args.reload = False

    try:
        if args.command == "serve":
            return run_serve(args)
        elif args.command == "rotate":
            return cmd_rotate(config_path=args.config_path, json_output=args.json_output)
        elif args.command == "decode":
            return cmd_decode(args.path, skip_invalid=args.skip_invalid)
        elif args.command == "profile":
            return cmd_profile(
                governance_path=args.governance_path,
                profile_name=args.profile_name,
                config_path=args.config_path,
                json_output=args.json_output,
            )
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
