import argparse
import asyncio
import logging
import sys

import httpx
from pydantic import ValidationError

from hilicurl.config.config import Config, parse_duration
from hilicurl.config.logging_config import setup_logging
from hilicurl.contracts.run_config import RunConfig
from hilicurl.contracts.run_report import RunReport
from hilicurl.core.cancellation import CancellationSource
from hilicurl.core.metrics_manager import MetricsManager
from hilicurl.core.probe_executor import ProbeExecutor
from hilicurl.core.probe_scheduler import ProbeScheduler
from hilicurl.errors import UsageError

logger = logging.getLogger(__name__)


class ArgumentParser(argparse.ArgumentParser):
    """argparse parser that raises UsageError instead of exiting with status 2."""

    def error(self, message):
        raise UsageError(message)


def _duration(text):
    try:
        return parse_duration(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="hilicurl",
        usage="%(prog)s [options] URL",
        description="Send GET requests to URL at a fixed interval until interrupted, "
        "then report how many were answered.",
    )
    parser.add_argument("url", metavar="URL", help="Target URL (http or https)")
    parser.add_argument(
        "--interval",
        type=_duration,
        default=Config.INTERVAL,
        help=f"Interval between each request (default: {Config.INTERVAL})",
    )
    parser.add_argument(
        "--timeout",
        type=_duration,
        default=Config.TIMEOUT,
        help=f"Request timeout (default: {Config.TIMEOUT})",
    )
    parser.add_argument(
        "--grace",
        type=_duration,
        default=Config.GRACE,
        help="How long to wait for in-flight requests before printing "
        f"statistics (default: {Config.GRACE})",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=Config.METRICS_PORT,
        help="Expose Prometheus metrics on this port",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level (default: $LOG_LEVEL or INFO)",
    )
    return parser


def parse_args(argv=None):
    """
    Parse the command line into a RunConfig.

    Returns:
        tuple: (RunConfig, argparse.Namespace)

    Raises:
        UsageError: On missing or invalid arguments.
    """
    args = build_parser().parse_args(argv)
    try:
        config = RunConfig(
            url=args.url,
            interval=args.interval,
            timeout=args.timeout,
            grace=args.grace,
            metrics_port=args.metrics_port,
        )
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise UsageError(details) from e
    return config, args


async def probe(config: RunConfig, cancellation: CancellationSource) -> RunReport:
    """
    Run the scheduler against config.url until the cancellation source fires.
    """
    metrics_manager = MetricsManager()
    if config.metrics_port:
        metrics_manager.serve(config.metrics_port)

    async with httpx.AsyncClient(headers={"User-Agent": Config.USER_AGENT}) as client:
        scheduler = ProbeScheduler(
            ProbeExecutor(client), metrics_manager=metrics_manager
        )
        return await scheduler.run(config, cancellation.event)


async def _run(config: RunConfig) -> RunReport:
    cancellation = CancellationSource()
    cancellation.install(asyncio.get_running_loop())
    try:
        return await probe(config, cancellation)
    finally:
        cancellation.remove()


def main(argv=None) -> int:
    try:
        config, args = parse_args(argv)
    except UsageError as e:
        build_parser().print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(args.log_level)
    report = asyncio.run(_run(config))
    print(report.render())
    return 0


if __name__ == "__main__":
    sys.exit(main())
