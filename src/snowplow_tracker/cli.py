#!/usr/bin/env python3
"""
CLI tool for sending demo events and running the dev collector.

Usage:
    snowplow-tracker collector --port 9090
    snowplow-tracker send --collector-url http://localhost:9090
    snowplow-tracker send --config tracker.yaml --count 10
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .config import Config, EmitterConfig, NetworkConfig, TrackerConfig
from .emitter.callback import EmitterCallback, FailureType
from .errors import TrackerError
from .events import EcommerceTransaction, EcommerceTransactionItem, PageView, Structured
from .payload import TrackerPayload
from .registry import TrackerRegistry


class PrintingCallback(EmitterCallback):
    """Reports delivery outcomes on stderr."""

    def on_success(self, payloads: list[TrackerPayload]) -> None:
        print(f"sent {len(payloads)} events", file=sys.stderr)

    def on_failure(
        self,
        failure_type: FailureType,
        will_retry: bool,
        payloads: list[TrackerPayload],
    ) -> None:
        print(
            f"failed {len(payloads)} events: {failure_type.value} (retry={will_retry})",
            file=sys.stderr,
        )


def _load_config(args) -> Config:
    if args.config:
        if args.config.endswith((".yaml", ".yml")):
            config = Config.from_yaml(args.config)
        else:
            config = Config.from_json(args.config)
        if args.collector_url:
            config.network = NetworkConfig(collector_url=args.collector_url)
        return config

    return Config(
        tracker=TrackerConfig(namespace=args.namespace, app_id=args.app_id),
        network=NetworkConfig(collector_url=args.collector_url),
        emitter=EmitterConfig(request_method=args.method),
    )


def cmd_send(args) -> int:
    """Track a page view, a structured event and a transaction, then close."""
    try:
        config = _load_config(args)
    except (TrackerError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if config.emitter.callback is None:
        config.emitter.callback = PrintingCallback()

    registry = TrackerRegistry()
    try:
        tracker = registry.create_tracker(
            config.tracker, config.network, config.emitter, config.subject
        )
    except TrackerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for i in range(args.count):
        tracker.track(PageView(
            page_url=f"https://example.com/demo/{i}",
            page_title="Demo page",
            referrer="https://example.com/",
        ))
        tracker.track(Structured(category="demo", action="click", label=f"button-{i}", value=1.0))
        tracker.track(EcommerceTransaction(
            order_id=f"order-{i}",
            total_value=25.0,
            currency="USD",
            items=(
                EcommerceTransactionItem(item_id=f"order-{i}", sku="sku-1", price=10.0, quantity=1),
                EcommerceTransactionItem(item_id=f"order-{i}", sku="sku-2", price=15.0, quantity=1),
            ),
        ))

    stats_emitter = tracker.emitter
    registry.close_all()

    print(json.dumps(stats_emitter.stats, indent=2))
    return 0 if stats_emitter.stats["failed"] == 0 else 2


def cmd_collector(args) -> int:
    from .collector import run

    run(host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Snowplow tracker command line tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # send command
    send_parser = subparsers.add_parser("send", help="Send demo events to a collector")
    send_parser.add_argument("--collector-url", help="Collector base URL")
    send_parser.add_argument("--config", help="YAML or JSON config file")
    send_parser.add_argument("--namespace", default="cli", help="Tracker namespace")
    send_parser.add_argument("--app-id", default="snowplow-cli", help="Application ID")
    send_parser.add_argument("--method", choices=["post", "get"], default="post")
    send_parser.add_argument("--count", type=int, default=1, help="Rounds of demo events")

    # collector command
    collector_parser = subparsers.add_parser("collector", help="Run the dev collector")
    collector_parser.add_argument("--host", default="127.0.0.1")
    collector_parser.add_argument("--port", type=int, default=9090)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "send":
        logging.basicConfig(
            level=args.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        return cmd_send(args)
    elif args.command == "collector":
        return cmd_collector(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
