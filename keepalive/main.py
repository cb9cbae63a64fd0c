import argparse
import sys
from dataclasses import replace
from keepalive.logger import get_logger
from keepalive.config import get_config, load_settings, clamp_int
from keepalive.exceptions import ConfigurationMissingError
from keepalive.scheduler import Scheduler
from keepalive.task import KeepAliveTask

class Colors:
    """ANSI color codes for terminal output."""
    OKGREEN = '\033[92m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'

def build_parser():
    parser = argparse.ArgumentParser(
        description="keepalive - keep an HTTP-triggered API and its database warm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m keepalive.main --url https://example.com/api/subscribe
  python -m keepalive.main --once --verbose
  HTTP_TRIGGER_URL=https://example.com/api/subscribe python keep_alive.py --interval 1
        """
    )
    parser.add_argument("--url", help="Target URL (overrides HTTP_TRIGGER_URL)")
    parser.add_argument("--interval", type=int, help="Minutes between ticks (overrides SCHEDULE_INTERVAL_MINUTES)")
    parser.add_argument("--once", action="store_true", help="Run a single tick and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode (only errors)")
    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logger = get_logger()
    config = get_config()

    logger.set_level(config.get('logging.level', 'INFO'))
    if args.verbose or config.get('logging.verbose'):
        logger.set_verbose(True)
    if args.quiet or config.get('logging.quiet'):
        logger.set_quiet(True)

    if args.url:
        config.set('ping.url', args.url)

    # A single tick without a URL is a logged no-op like any scheduled tick.
    # The long-running loop refuses to start instead, since every tick it
    # could ever run would be that same no-op.
    try:
        settings = load_settings(config, require_url=not args.once)
    except ConfigurationMissingError as e:
        logger.error(f"❌ {e}, nothing to keep alive")
        return 2

    if args.interval is not None:
        settings = replace(settings, schedule_minutes=clamp_int(args.interval, settings.schedule_minutes, 1, 60))

    task = KeepAliveTask(settings)

    if args.once:
        result = task.run_tick()
        color = Colors.OKGREEN if result.ok else Colors.FAIL
        print(f"{color}{Colors.BOLD}{result.kind.value}{Colors.ENDC}")
        return 0 if result.ok else 1

    logger.info(
        f"Starting keep-alive for {settings.url} every {settings.schedule_minutes} minute(s) "
        f"(strategy={settings.strategy}, heavy every {settings.heavy_interval_minutes} min)"
    )
    scheduler = Scheduler()
    scheduler.schedule_minutes(settings.schedule_minutes, task)
    scheduler.run_continuously()
    logger.info(f"Stopped after {scheduler.invocations} tick(s), {scheduler.failures} failed")
    return 0

if __name__ == "__main__":
    sys.exit(main())
