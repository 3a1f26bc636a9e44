#!/usr/bin/env python3
"""
Command-line interface for chart collages.
"""

import argparse
import sys

from chart_collage.utils.common import setup_logging

# Set up logging
logger = setup_logging(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chart collage tools")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the collage web API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    serve_parser.add_argument("--port", type=int, default=5000, help="Port to listen on")
    serve_parser.add_argument(
        "--memory",
        action="store_true",
        help="Keep collages in memory instead of uploading to Cloudinary",
    )
    serve_parser.add_argument("--env-file", default=None, help="Path to a .env file")
    serve_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")

    # Generate command
    generate_parser = subparsers.add_parser(
        "generate", help="Render the demo charts and submit them as one collage"
    )
    generate_parser.add_argument(
        "--url", default="http://localhost:5000", help="Base URL of the collage API"
    )
    generate_parser.add_argument(
        "--size", type=int, default=400, help="Edge length of each chart in pixels"
    )

    # List command
    list_parser = subparsers.add_parser("list", help="List stored collages")
    list_parser.add_argument(
        "--url", default="http://localhost:5000", help="Base URL of the collage API"
    )

    return parser


def run_serve(args) -> int:
    from chart_collage.app.main import create_app
    from chart_collage.core.config import CollageConfig
    from chart_collage.core.errors import ConfigurationError
    from chart_collage.services.media.memory_store import MemoryStore

    try:
        config = CollageConfig.from_env(args.env_file)
        store = MemoryStore(folder=config.folder) if args.memory else None
        app = create_app(store=store, config=config)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logger.info(f"Serving collage API on http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


def run_generate(args) -> int:
    from chart_collage.capture.charts import capture_batch
    from chart_collage.capture.client import CollageClient, CollageClientError

    batch = capture_batch(size=(args.size, args.size))
    client = CollageClient(args.url)
    try:
        artifact = client.submit(batch)
    except CollageClientError as e:
        logger.error(f"Collage generation failed: {e}")
        return 1

    print(f"{artifact.id}\t{artifact.width}x{artifact.height}\t{artifact.url}")
    return 0


def run_list(args) -> int:
    from chart_collage.capture.client import CollageClient, CollageClientError

    try:
        artifacts = CollageClient(args.url).list_collages()
    except CollageClientError as e:
        logger.error(f"Listing collages failed: {e}")
        return 1

    if not artifacts:
        print("No collages found.")
    for artifact in artifacts:
        print(f"{artifact.id}\t{artifact.width}x{artifact.height}\t{artifact.url}")
    return 0


def main(argv=None) -> int:
    """
    Main entry point for the chart collage CLI.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {"serve": run_serve, "generate": run_generate, "list": run_list}
    if args.command not in commands:
        parser.print_help()
        return 1
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
