"""
Warp CLI - Command-line interface for the gateway.

Usage:
    warp serve                      Run the HTTP API
    warp prompt --difficulty D      Print the level prompt for a difficulty
    warp difficulty --deaths N ...  Compute the next difficulty
    warp validate <completion>      Extract and validate a saved completion
"""

import argparse
import json
import logging
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Warp - Generative Level Gateway",
        prog="warp",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=3001)
    serve_parser.add_argument("--log-level", default="info",
                              choices=["debug", "info", "warning", "error"])

    # Prompt command
    prompt_parser = subparsers.add_parser("prompt", help="Print a level prompt")
    prompt_parser.add_argument("--difficulty", "-d", type=int, default=1)
    prompt_parser.add_argument("--level", "-l", type=int, default=1, help="Level number")

    # Difficulty command
    difficulty_parser = subparsers.add_parser("difficulty", help="Compute the next difficulty")
    difficulty_parser.add_argument("--deaths", type=int, default=0)
    difficulty_parser.add_argument("--time", type=float, default=60.0, help="Completion time in seconds")
    difficulty_parser.add_argument("--coins", type=int, default=0, help="Coins collected")
    difficulty_parser.add_argument("--total-coins", type=int, default=1)
    difficulty_parser.add_argument("--current", type=int, default=1, help="Current difficulty")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a saved completion")
    validate_parser.add_argument("completion_file", help="Path to raw completion text")

    args = parser.parse_args(argv)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "prompt":
        cmd_prompt(args)
    elif args.command == "difficulty":
        cmd_difficulty(args)
    elif args.command == "validate":
        cmd_validate(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("warp.api.app:app", host=args.host, port=args.port, log_level=args.log_level)


def cmd_prompt(args):
    """Print the level prompt."""
    from .prompting import build_level_prompt

    print(build_level_prompt(args.difficulty, args.level))


def cmd_difficulty(args):
    """Compute the next difficulty."""
    from .prompting import PerformanceStats, next_difficulty, difficulty_to_description

    stats = PerformanceStats(
        deaths=args.deaths,
        completion_time=args.time,
        coins_collected=args.coins,
        total_coins=args.total_coins,
        current_difficulty=args.current,
    )
    difficulty = next_difficulty(stats)
    print(f"Next difficulty: {difficulty}")
    print(f"Description: {difficulty_to_description(difficulty)}")


def cmd_validate(args):
    """Extract and validate a saved completion."""
    from .errors import ParseError
    from .level_schema import extract_document, validate_level

    try:
        with open(args.completion_file, "r", encoding="utf-8") as f:
            raw_text = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.completion_file}")
        sys.exit(1)

    try:
        document = extract_document(raw_text)
    except ParseError as e:
        print(f"Parse error: {e}")
        sys.exit(1)

    result = validate_level(document)
    if not result.valid:
        print("Level is not playable:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print(json.dumps(result.data.to_dict(), indent=2))


if __name__ == "__main__":
    main()
