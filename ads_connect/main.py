"""
Main entry point for ADS Connect.

This module provides the command-line interface for the interactive route
console, including argument parsing, pre-flight checks, component wiring and
graceful shutdown handling.
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config.config_loader import AppConfig, ConfigLoader
from .core.device_classifier import DeviceClassifier
from .core.discovery_loop import DiscoveryLoop
from .core.dispatcher import ConnectionDispatcher, DispatcherSettings
from .providers import BaseRouteProvider, PowerShellRouteProvider, StaticRouteProvider, find_powershell
from .utils.error_handler import ConfigurationError, ErrorContext, ErrorHandler, ErrorSeverity, ErrorType
from .utils.helper_provisioner import HelperProvisioner
from .utils.input_reader import TimeoutInputReader
from .utils.logger import LogLevel, get_logger, set_log_level
from .utils.process_launcher import ProcessLauncher
from .utils.renderer import ConsoleRenderer

EXIT_INTERRUPTED = 130


class ADSConnectApp:
    """
    Main application class for ADS Connect.

    Handles CLI interface, pre-flight checks, and application lifecycle.
    """

    def __init__(self, install_signal_handlers: bool = True):
        """Initialize the application."""
        self.logger = get_logger(__name__)
        self.loop: Optional[DiscoveryLoop] = None
        self.shutdown_requested = False

        if install_signal_handlers:
            signal.signal(signal.SIGINT, self._signal_handler)
            signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        """
        Handle shutdown signals gracefully.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_names = {signal.SIGINT: "SIGINT", signal.SIGTERM: "SIGTERM"}
        signal_name = signal_names.get(signum, f"Signal {signum}")

        if not self.shutdown_requested:
            self.logger.warning(f"Received {signal_name} - shutting down...")
            self.shutdown_requested = True
            # Ctrl+C ends with the conventional interrupt status
            sys.exit(EXIT_INTERRUPTED if signum == signal.SIGINT else 0)
        else:
            self.logger.error("Force shutdown requested - terminating immediately")
            sys.exit(1)

    def load_config(self, args: argparse.Namespace) -> AppConfig:
        """
        Load the configuration file and apply command line overrides.

        Args:
            args: Parsed command line arguments

        Returns:
            AppConfig: Effective configuration
        """
        config = ConfigLoader(args.config).load()

        if args.timeout is not None:
            config.console.timeout_seconds = args.timeout
        if args.user is not None:
            config.credentials.user = args.user
        if args.password is not None:
            config.credentials.password = args.password
        if args.winscp_path is not None:
            config.tools.winscp_path = args.winscp_path
        if args.cerhost_path is not None:
            config.tools.cerhost_path = args.cerhost_path
        if args.routes_file is not None:
            config.provider.type = "file"
            config.provider.routes_file = args.routes_file
        return config

    def _perform_preflight_checks(self, config: AppConfig) -> bool:
        """
        Check that the configured route provider can run.

        Returns:
            bool: True if all checks pass, False otherwise
        """
        self.logger.section("PRE-FLIGHT CHECKS")

        if config.provider.type == "file":
            routes_file = config.provider.routes_file
            if not routes_file or not Path(routes_file).is_file():
                self.logger.error(f"Routes file not found: {routes_file}")
                return False
            self.logger.debug(f"Using routes file {routes_file}")
        else:
            self.logger.info("Checking availability of PowerShell...")
            powershell = find_powershell()
            if not powershell:
                self.logger.error("Required tool 'powershell' not found in PATH")
                self.logger.info("Use --routes-file to run from a static route list")
                return False
            self.logger.debug(f"Found PowerShell at: {powershell}")

        self.logger.success("All pre-flight checks passed")
        return True

    def build_provider(self, config: AppConfig) -> BaseRouteProvider:
        if config.provider.type == "file":
            if not config.provider.routes_file:
                raise ConfigurationError("Provider type 'file' requires a routes_file")
            return StaticRouteProvider(config.provider.routes_file, logger=self.logger)
        return PowerShellRouteProvider(timeout=config.provider.command_timeout, logger=self.logger)

    def build_loop(self, config: AppConfig) -> DiscoveryLoop:
        """Wire the console components together."""
        error_handler = ErrorHandler(self.logger)
        classifier = DeviceClassifier(
            remote_display_port=config.remote_display.port,
            probe_timeout_ms=config.remote_display.probe_timeout_ms,
        )
        tools = config.tools
        provisioner = HelperProvisioner(
            target_path=Path(tools.cerhost_path).expanduser().resolve(),
            download_url=tools.cerhost_url,
            executable_name=tools.cerhost_executable,
            logger=self.logger,
        )
        dispatcher = ConnectionDispatcher(
            settings=DispatcherSettings(
                user=config.credentials.user,
                password=config.credentials.password,
                ssh_client=tools.ssh_client,
                rdp_client=tools.rdp_client,
                winscp_path=tools.winscp_path,
                winscp_download_url=tools.winscp_download_url,
                remote_display_port=config.remote_display.port,
                probe_timeout_ms=config.remote_display.probe_timeout_ms,
            ),
            launcher=ProcessLauncher(self.logger),
            provisioner=provisioner,
            logger=self.logger,
            error_handler=error_handler,
        )
        loop = DiscoveryLoop(
            provider=self.build_provider(config),
            classifier=classifier,
            renderer=ConsoleRenderer(is_recognized=classifier.is_recognized),
            reader=TimeoutInputReader(poll_interval=config.console.poll_interval_ms / 1000.0),
            dispatcher=dispatcher,
            timeout_seconds=config.console.timeout_seconds,
            message_pause_seconds=config.console.message_pause_seconds,
            logger=self.logger,
            error_handler=error_handler,
        )
        dispatcher.confirm = loop.confirm
        return loop

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the interactive console.

        Args:
            args: Parsed command line arguments

        Returns:
            int: Exit code (0 for success, non-zero for failure)
        """
        try:
            config = self.load_config(args)

            if not self._perform_preflight_checks(config):
                if not args.skip_checks:
                    self.logger.error("Pre-flight checks failed. Use --skip-checks to bypass.")
                    return 1
                self.logger.warning("Skipping pre-flight checks as requested")

            self.loop = self.build_loop(config)
            return self.loop.run()

        except ConfigurationError as e:
            ErrorHandler(self.logger).handle_error(e, ErrorContext(
                error_type=ErrorType.CONFIGURATION_ERROR,
                severity=ErrorSeverity.CRITICAL,
                operation="build_loop",
                component="ADSConnectApp",
            ))
            return 1
        except KeyboardInterrupt:
            self.logger.warning("Interrupted by user")
            return EXIT_INTERRUPTED


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="ads-connect",
        description="ADS Connect - discover TwinCAT devices and open remote sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m ads_connect                              # Discover via Get-AdsRoute
  python -m ads_connect --timeout 5                  # Refresh every 5 seconds
  python -m ads_connect --routes-file routes.yml     # Use a static route list
  python -m ads_connect --user Administrator --password 1
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to the YAML configuration file. Defaults to the bundled ads_connect.yml"
    )

    parser.add_argument(
        "--timeout",
        type=int,
        metavar="SECONDS",
        help="Refresh interval and input timeout in seconds (default: 10)"
    )

    parser.add_argument(
        "--winscp-path",
        type=str,
        help="Path to WinSCP.exe"
    )

    parser.add_argument(
        "--cerhost-path",
        type=str,
        help="Path where CERHOST.exe is cached (downloaded on first use)"
    )

    parser.add_argument(
        "--user",
        type=str,
        help="Remote account for RDP, SSH and SFTP (default: Administrator)"
    )

    parser.add_argument(
        "--password",
        type=str,
        help="Password of the remote account"
    )

    parser.add_argument(
        "--routes-file",
        type=str,
        help="Read routes from a YAML file instead of Get-AdsRoute"
    )

    parser.add_argument(
        "--skip-checks",
        action="store_true",
        help="Skip pre-flight checks"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"ADS Connect {__version__}"
    )

    return parser


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for ADS Connect.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        set_log_level(LogLevel.DEBUG)

    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be positive")

    app = ADSConnectApp()
    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
