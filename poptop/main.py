"""Main application entry point for the poptop metrics dashboard."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import yaml

from . import __version__
from .cache import WidgetCache
from .config import ConfigError, DashboardConfig, WidgetId
from .layout import Orientation
from .ui import DashboardApp

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/poptop/config.yaml")
LOG_FILE = "poptop.log"

DESCRIPTION = "Charts system metrics over a time window in your terminal."


def _fail(message: str) -> None:
    logger.error(message)
    print(f"poptop: {message}", file=sys.stderr)
    sys.exit(1)


class PoptopApplication:
    """Coordinates configuration, the widget cache and the TUI."""

    def __init__(self, config_path: str | Path | None = None):
        """Initialize the application.

        Args:
            config_path: Explicit configuration file. When omitted the user
                config is used if it exists, otherwise built-in defaults.
        """
        self.config_path = Path(config_path) if config_path is not None else None
        self.config = DashboardConfig()
        self.cache: WidgetCache | None = None
        self.ui_app: DashboardApp | None = None
        self.return_code = 0

    def load_config(self):
        """Load configuration from YAML file."""
        explicit = self.config_path is not None
        config_file = (self.config_path if explicit else DEFAULT_CONFIG_PATH).expanduser()

        if not config_file.exists():
            if explicit:
                _fail(f"Configuration file not found: {config_file}")
            logger.info("No configuration file, using defaults")
            return

        try:
            with open(config_file, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            _fail(f"Error parsing configuration file {config_file}: {e}")
        except OSError as e:
            _fail(f"Error reading configuration file {config_file}: {e}")

        try:
            self.config = DashboardConfig.from_mapping(data)
        except ConfigError as e:
            _fail(f"Invalid configuration in {config_file}: {e}")

        logger.info(f"Loaded configuration from {config_file}")

    def apply_args(self, args: argparse.Namespace):
        """Override configuration values with command line flags."""
        config = self.config
        try:
            if args.redraw_interval is not None:
                config.redraw_interval = args.redraw_interval / 1000
            if args.sample_interval is not None:
                config.sample_interval = args.sample_interval / 1000
            if args.chart_duration is not None:
                config.chart_duration = args.chart_duration
            if args.smooth is not None:
                config.smoothing_samples = args.smooth
            if args.top_rows is not None:
                config.top_rows = args.top_rows
            if args.tile:
                config.tile = True
            if args.side_by_side:
                config.orientation = Orientation.SIDE_BY_SIDE
            for widget_id in args.widgets or []:
                config.select_widget(widget_id)
            config.validate()
        except ConfigError as e:
            _fail(str(e))

        logger.info(
            f"Configuration: widgets={[w.label for w in config.widgets]}, "
            f"redraw={config.redraw_interval}s, sample={config.sample_interval}s, "
            f"duration={config.chart_duration}s, smooth={config.smoothing_samples}"
        )

    async def run_async(self) -> int:
        """Run the dashboard until the user quits or a metric source fails."""
        self.cache = WidgetCache(self.config.sampler_settings())
        self.ui_app = DashboardApp(self.config, self.cache)
        self.cache.on_failure = self.ui_app.report_sampler_failure

        try:
            await self.ui_app.run_async()
        finally:
            await self.cache.close()

        self.return_code = self.ui_app.return_code or 0
        return self.return_code

    def run(self) -> int:
        """Run the application."""
        try:
            return asyncio.run(self.run_async())
        except KeyboardInterrupt:
            logger.info("Application terminated by user")
            return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poptop",
        description=DESCRIPTION,
        epilog="Widget flags select which charts to show, in the order given. "
        "Without any, load, cpu, network and disk-iops are shown. Press ? in the dashboard for details.",
    )
    parser.add_argument("--config", metavar="PATH", help=f"Configuration file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-r", dest="redraw_interval", type=int, metavar="MS", help="Redraw interval in milliseconds (default: 500)")
    parser.add_argument("-s", dest="sample_interval", type=int, metavar="MS", help="Sample interval in milliseconds (default: 500)")
    parser.add_argument(
        "-d", dest="chart_duration", type=int, metavar="SECONDS", help="Duration of the charted series in seconds (default: 120)"
    )
    parser.add_argument("-a", dest="smooth", type=int, metavar="N", help="Samples included in the running average, at most the samples per chart (default: 4)")
    parser.add_argument("--top-rows", type=int, metavar="N", help="Lines in the top process lists (default: 25)")
    parser.add_argument("--tile", action="store_true", help="Alternate split orientation to form a grid")
    parser.add_argument("--side-by-side", action="store_true", help="Split side by side instead of stacked")

    widgets = parser.add_argument_group("widgets")
    for flag, widget_id, text in (
        ("-L", WidgetId.LOAD, "Add CPU Load chart"),
        ("-C", WidgetId.CPU, "Add CPU %% chart"),
        ("-N", WidgetId.NETWORK, "Add Network IO chart"),
        ("-D", WidgetId.DISK_IOPS, "Add Disk IOPS chart"),
        ("-E", WidgetId.DISK_IO, "Add Disk IO chart"),
        ("-T", WidgetId.TOP_CPU, "Add Top Processes by CPU list"),
        ("-M", WidgetId.TOP_MEM, "Add Top Processes by Memory list"),
    ):
        widgets.add_argument(flag, dest="widgets", action="append_const", const=widget_id, help=text)

    return parser


def main(argv: list[str] | None = None):
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)

    # Configure logging - only to file, the terminal belongs to the TUI
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(LOG_FILE)],
    )

    logger.info("=" * 60)
    logger.info(f"poptop {__version__} starting")
    logger.info("=" * 60)

    app = PoptopApplication(args.config)
    app.load_config()
    app.apply_args(args)
    return_code = app.run()

    logger.info(f"Application shutdown complete (return code {return_code})")
    if return_code:
        sys.exit(return_code)


if __name__ == "__main__":
    main()
