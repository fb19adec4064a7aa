"""CLI entry point for the Trill SDK."""

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from typing import Any

import anyio

from . import (
    ConfigError,
    ExitCode,
    LocalImageInput,
    TextInput,
    ThreadOptions,
    Trill,
    TrillError,
    TrillOptions,
    TurnOptions,
    __version__,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="trill-sdk",
        description="Trill SDK - run agent turns through the trill CLI",
    )
    parser.add_argument("--version", action="version", version=f"trill-sdk {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("version", help="Show version")

    run_parser = subparsers.add_parser("run", help="Run a single turn")
    run_parser.add_argument("prompt", help="Prompt text, or - to read it from stdin")
    run_parser.add_argument("--resume", "-r", metavar="THREAD_ID", help="Thread to resume")
    run_parser.add_argument("--schema", "-s", help="Path to a JSON Schema for the final response")
    run_parser.add_argument("--model", "-m", help="Model to use")
    run_parser.add_argument(
        "--sandbox",
        choices=["read-only", "workspace-write", "danger-full-access"],
        help="Sandbox mode",
    )
    run_parser.add_argument("--cd", dest="working_directory", help="Agent working directory")
    run_parser.add_argument(
        "--skip-git-repo-check", action="store_true", help="Allow running outside a git repo"
    )
    run_parser.add_argument(
        "--config",
        "-c",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Config override (dotted key, JSON value); repeatable",
    )
    run_parser.add_argument("--image", "-i", action="append", default=[], help="Attach an image")
    run_parser.add_argument("--timeout", type=float, help="Turn timeout in seconds")
    run_parser.add_argument(
        "--trill-path",
        default=os.environ.get("CODEX_EXECUTABLE"),
        help="Path to the trill executable (default: $CODEX_EXECUTABLE, then PATH)",
    )
    run_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json", "stream"],
        default="text",
        help="Output format (default: text)",
    )
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "version":
            return cmd_version()
        elif args.command == "run":
            return cmd_run(args)
    except TrillError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return ExitCode.RUNTIME_ERROR

    return 0


def cmd_version() -> int:
    """Show version."""
    print(f"trill-sdk {__version__}")
    return 0


def parse_config_overrides(pairs: list[str]) -> dict[str, Any]:
    """Turn ``a.b=value`` pairs into a nested mapping.

    Values are parsed as JSON when possible and kept as strings otherwise.
    """
    config: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ConfigError(f"Invalid config override '{pair}', expected KEY=VALUE")
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        node = config
        parts = key.split(".")
        for part in parts[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ConfigError(f"Config override '{key}' conflicts with an earlier value")
        node[parts[-1]] = value
    return config


def cmd_run(args) -> int:
    """Run one turn and print the result."""
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    prompt = sys.stdin.read() if args.prompt == "-" else args.prompt

    schema = None
    if args.schema:
        with open(args.schema) as f:
            schema = json.load(f)

    turn_input: Any = prompt
    if args.image:
        turn_input = [TextInput(prompt)] + [LocalImageInput(path) for path in args.image]

    trill = Trill(
        TrillOptions(
            trill_path_override=args.trill_path,
            config=parse_config_overrides(args.config) or None,
        )
    )
    thread_options = ThreadOptions(
        model=args.model,
        sandbox_mode=args.sandbox,
        working_directory=args.working_directory,
        skip_git_repo_check=args.skip_git_repo_check,
    )
    thread = (
        trill.resume_thread(args.resume, thread_options)
        if args.resume
        else trill.start_thread(thread_options)
    )
    turn_options = TurnOptions(output_schema=schema, timeout=args.timeout)

    if args.output == "stream":

        async def stream() -> None:
            async for event in thread.run_streamed(turn_input, turn_options):
                print(json.dumps(asdict(event)), flush=True)

        anyio.run(stream)
        return 0

    turn = thread.run_sync(turn_input, turn_options)

    if args.output == "json":
        output = turn.to_dict()
        output["thread_id"] = thread.id
        print(json.dumps(output, indent=2))
    else:
        print(turn.final_response)
        if thread.id:
            print(f"[thread {thread.id}]", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
