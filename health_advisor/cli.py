"""CLI commands for Health Advisor AI."""

import argparse
import json
import logging
import sys

import uvicorn

from health_advisor.config import settings
from health_advisor.services.fallback_advice import generate_advice, generate_quick_advice
from health_advisor.services.observation import (
    InvalidBristolTypeError,
    parse_bristol_type,
    parse_observation,
)
from health_advisor.services.scoring import assess_observation


def parse_color_option(value: str) -> tuple[str, dict]:
    """
    Parse ``COLOR:STATUS:PCT`` (status and percentage optional).

    Raises:
        argparse.ArgumentTypeError: malformed percentage or empty color
    """
    parts = value.split(":")
    color = parts[0].strip()
    if not color or len(parts) > 3:
        raise argparse.ArgumentTypeError(
            f"Invalid color '{value}', expected COLOR:STATUS:PCT"
        )

    info = {"status": parts[1].strip() if len(parts) > 1 and parts[1].strip() else "Normal"}
    if len(parts) == 3:
        try:
            info["percentage"] = float(parts[2])
        except ValueError:
            raise argparse.ArgumentTypeError(
                f"Invalid percentage in '{value}'"
            ) from None
    return color, info


def build_payload(bristol_type: str, colors=None, volume=None) -> dict:
    """Assemble a request-shaped payload from CLI options."""
    payload = {"bristolType": bristol_type}
    if colors:
        payload["colorAnalysis"] = {"summary": dict(colors)}
    if volume:
        payload["volumeAnalysis"] = {"overall_volume_class": volume}
    return payload


def advise(bristol_type: str, colors=None, volume=None) -> None:
    """Print the deterministic advice document for an observation."""
    try:
        observation = parse_observation(build_payload(bristol_type, colors, volume))
    except InvalidBristolTypeError as e:
        print(f"Error: {e}")
        sys.exit(1)

    assessment = assess_observation(observation)
    document = generate_advice(
        observation.bristol_type,
        assessment.color_warnings,
        assessment.volume_issues,
        observation.user_profile,
    )
    print(json.dumps(document.model_dump(by_alias=True), indent=2, ensure_ascii=False))


def quick(bristol_type: str) -> None:
    """Print quick advice for a Bristol type."""
    try:
        parsed_type = parse_bristol_type(bristol_type)
    except InvalidBristolTypeError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(json.dumps(generate_quick_advice(parsed_type), indent=2, ensure_ascii=False))


def serve(host: str, port: int) -> None:
    """Run the API server."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "health_advisor.main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


def main():
    parser = argparse.ArgumentParser(description="Health Advisor AI CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=settings.host, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=settings.port, help="Port")

    # advise command
    advise_parser = subparsers.add_parser(
        "advise", help="Print deterministic advice without calling the AI"
    )
    advise_parser.add_argument(
        "--bristol-type", required=True, help="Bristol stool type (1-7)"
    )
    advise_parser.add_argument(
        "--color",
        action="append",
        type=parse_color_option,
        default=[],
        help="Color reading as COLOR:STATUS:PCT (repeatable)",
    )
    advise_parser.add_argument(
        "--volume", help="Overall volume class (small, normal, large)"
    )

    # quick command
    quick_parser = subparsers.add_parser("quick", help="Print quick advice")
    quick_parser.add_argument(
        "--bristol-type", required=True, help="Bristol stool type (1-7)"
    )

    args = parser.parse_args()

    if args.command == "serve":
        serve(args.host, args.port)
    elif args.command == "advise":
        advise(args.bristol_type, args.color, args.volume)
    elif args.command == "quick":
        quick(args.bristol_type)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
