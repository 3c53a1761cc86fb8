# config_manager.py

import argparse
import os
import sys
from typing import Optional, Tuple

from dotenv import load_dotenv
from accessibility_tester.utils.logger import configure_logger, logger

DEFAULT_AXE_SCRIPT_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

SUPPORTED_TRANSPORTS = ("stdio", "sse", "streamable-http")
SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")
SUPPORTED_WAIT_UNTIL = ("load", "domcontentloaded", "networkidle", "commit")


class BaseConfigManager:
    """
    The base class that contains the common logic for:
      - argument parsing
      - loading from a dict
      - optional env variable merging
      - value checks
    """

    def __init__(self, config_dict: dict, ignore_env: bool = False):
        """
        Initialize the config manager with config_dict as base.

        Args:
            config_dict (dict): The base configuration dictionary.
            ignore_env (bool): If True, .env, CLI arguments and environment variables are ignored.
        """
        self._config = config_dict.copy()
        self._ignore_env = ignore_env

        # 1) Possibly load .env if not in test environment
        is_test_env = os.environ.get("IS_TEST_ENV", "false").lower() == "true"
        if not is_test_env and not self._ignore_env:
            env_file_path: str = ".env"
            load_dotenv(env_file_path, override=True)

        # 2) Parse command-line arguments to override env
        if not self._ignore_env:
            self._parse_arguments()

        # 3) Merge environment variables
        if not self._ignore_env:
            self._merge_from_env()

        # 4) Defaults for anything still missing
        self._finalize_defaults()

        # 5) Reject values the runner cannot use
        self._check_values()

        configure_logger(self.get_log_level())

    # -------------------------------------------------------------------------
    # Internal Helpers
    # -------------------------------------------------------------------------

    def _parse_arguments(self) -> None:
        """
        Parse command-line arguments and place them into the environment
        so that env merging picks them up.
        """
        parser = argparse.ArgumentParser(
            description="accessibility-tester: MCP server running axe-core WCAG audits in a headless browser",
            allow_abbrev=False,
        )
        parser.add_argument(
            "--transport",
            type=str,
            choices=SUPPORTED_TRANSPORTS,
            help="Transport mode (stdio, sse or streamable-http).",
            required=False,
        )
        parser.add_argument(
            "--browser-type",
            type=str,
            choices=SUPPORTED_BROWSERS,
            help="Browser engine used for the audits.",
            required=False,
        )
        parser.add_argument(
            "--headed",
            action="store_true",
            help="Show the browser window instead of running headless.",
            required=False,
        )
        parser.add_argument(
            "--cdp-endpoint-url",
            type=str,
            help="Connect to an already running browser over CDP.",
            required=False,
        )
        parser.add_argument(
            "--navigation-timeout",
            type=int,
            help="Navigation timeout in milliseconds.",
            required=False,
        )
        parser.add_argument(
            "--parallel",
            action="store_true",
            help="Audit all URLs of a call concurrently.",
            required=False,
        )
        parser.add_argument(
            "--log-level",
            type=str,
            help="Log level (DEBUG, INFO, WARNING, ERROR).",
            required=False,
        )

        # Parse known args; ignore unknown ones (e.g. from a test runner)
        args, _ = parser.parse_known_args()

        if args.transport:
            os.environ["TRANSPORT"] = args.transport
        if args.browser_type:
            os.environ["BROWSER_TYPE"] = args.browser_type
        if args.headed:
            os.environ["HEADLESS"] = "false"
        if args.cdp_endpoint_url:
            os.environ["CDP_ENDPOINT_URL"] = args.cdp_endpoint_url
        if args.navigation_timeout is not None:
            os.environ["NAVIGATION_TIMEOUT"] = str(args.navigation_timeout)
        if args.parallel:
            os.environ["PARALLEL_AUDITS"] = "true"
        if args.log_level:
            os.environ["LOG_LEVEL"] = args.log_level

    def _merge_from_env(self) -> None:
        """
        Merge relevant environment variables into the configuration dictionary.
        """
        relevant_keys = [
            "MODE",
            "TRANSPORT",
            "BROWSER_TYPE",
            "HEADLESS",
            "CDP_ENDPOINT_URL",
            "BROWSER_RESOLUTION",
            "LOCALE",
            "IGNORE_CERTIFICATE_ERRORS",
            "NAVIGATION_TIMEOUT",
            "WAIT_UNTIL",
            "AXE_SCRIPT_URL",
            "PARALLEL_AUDITS",
            "LOG_LEVEL",
        ]

        for key in relevant_keys:
            if key in os.environ:
                self._config[key] = os.environ[key]

    def _finalize_defaults(self) -> None:
        """
        Provide default values for keys that might not be in self._config.
        """
        self._config.setdefault("MODE", "prod")
        self._config.setdefault("TRANSPORT", "stdio")
        self._config.setdefault("BROWSER_TYPE", "chromium")
        self._config.setdefault("HEADLESS", "true")
        self._config.setdefault("CDP_ENDPOINT_URL", None)
        self._config.setdefault("BROWSER_RESOLUTION", "1920,1080")
        self._config.setdefault("LOCALE", "en-US")
        self._config.setdefault("IGNORE_CERTIFICATE_ERRORS", "false")
        self._config.setdefault("NAVIGATION_TIMEOUT", "30000")
        self._config.setdefault("WAIT_UNTIL", "networkidle")
        self._config.setdefault("AXE_SCRIPT_URL", DEFAULT_AXE_SCRIPT_URL)
        self._config.setdefault("PARALLEL_AUDITS", "false")
        self._config.setdefault("LOG_LEVEL", "INFO")

        if self._config["MODE"] == "debug":
            self._config["LOG_LEVEL"] = "DEBUG"

    def _check_values(self) -> None:
        """
        Exit early on settings the server cannot run with.
        """
        transport = self._config["TRANSPORT"]
        if transport not in SUPPORTED_TRANSPORTS:
            logger.error(f"Unsupported TRANSPORT '{transport}'. Use one of: {', '.join(SUPPORTED_TRANSPORTS)}.")
            sys.exit(1)

        browser_type = self._config["BROWSER_TYPE"]
        if browser_type not in SUPPORTED_BROWSERS:
            logger.error(f"Unsupported BROWSER_TYPE '{browser_type}'. Use one of: {', '.join(SUPPORTED_BROWSERS)}.")
            sys.exit(1)

        wait_until = self._config["WAIT_UNTIL"]
        if wait_until not in SUPPORTED_WAIT_UNTIL:
            logger.error(f"Unsupported WAIT_UNTIL '{wait_until}'. Use one of: {', '.join(SUPPORTED_WAIT_UNTIL)}.")
            sys.exit(1)

        try:
            timeout = int(self._config["NAVIGATION_TIMEOUT"])
        except (TypeError, ValueError):
            timeout = 0
        if timeout <= 0:
            logger.error(f"NAVIGATION_TIMEOUT must be a positive number of milliseconds, got '{self._config['NAVIGATION_TIMEOUT']}'.")
            sys.exit(1)

        try:
            width, height = self.get_resolution()
        except ValueError:
            width = height = 0
        if width <= 0 or height <= 0:
            logger.error(f"BROWSER_RESOLUTION must be '<width>,<height>' in pixels, got '{self._config['BROWSER_RESOLUTION']}'.")
            sys.exit(1)

    # -------------------------------------------------------------------------
    # Public Getters
    # -------------------------------------------------------------------------

    def get_mode(self) -> str:
        return self._config["MODE"]

    def get_transport(self) -> str:
        return self._config["TRANSPORT"]

    def get_browser_type(self) -> str:
        return self._config["BROWSER_TYPE"]

    def should_run_headless(self) -> bool:
        return str(self._config["HEADLESS"]).lower().strip() == "true"

    def get_cdp_config(self) -> Optional[dict]:
        """
        Return CDP config if `CDP_ENDPOINT_URL` is set.
        """
        cdp_endpoint_url = self._config.get("CDP_ENDPOINT_URL")
        if cdp_endpoint_url:
            return {"endpoint_url": cdp_endpoint_url}
        return None

    def get_resolution(self) -> Tuple[int, int]:
        width, height = str(self._config["BROWSER_RESOLUTION"]).split(",")
        return int(width), int(height)

    def get_locale(self) -> str:
        return self._config["LOCALE"]

    def should_ignore_certificate_errors(self) -> bool:
        return str(self._config.get("IGNORE_CERTIFICATE_ERRORS", "false")).lower().strip() == "true"

    def get_navigation_timeout(self) -> int:
        """Navigation timeout in milliseconds."""
        return int(self._config["NAVIGATION_TIMEOUT"])

    def get_wait_until(self) -> str:
        return self._config["WAIT_UNTIL"]

    def get_axe_script_url(self) -> str:
        return self._config["AXE_SCRIPT_URL"]

    def should_run_parallel(self) -> bool:
        return str(self._config["PARALLEL_AUDITS"]).lower().strip() == "true"

    def get_log_level(self) -> str:
        return self._config["LOG_LEVEL"]


# ------------------------------------------------------------------------------
# Derived classes for Non-Singleton and Singleton usage
# ------------------------------------------------------------------------------


class NonSingletonConfigManager(BaseConfigManager):
    """
    A regular config manager that can be instantiated multiple times
    without any shared state among instances.
    """

    def __init__(self, config_dict: dict, ignore_env: bool = False):
        super().__init__(config_dict=config_dict, ignore_env=ignore_env)


class SingletonConfigManager(BaseConfigManager):
    """Singleton configuration manager for the entire application."""

    _instance = None

    def __init__(self, config_dict: dict, ignore_env: bool = False):
        if SingletonConfigManager._instance is not None:
            raise RuntimeError("Use SingletonConfigManager.instance() instead")
        super().__init__(config_dict=config_dict, ignore_env=ignore_env)

    @classmethod
    def instance(cls, config_dict: Optional[dict] = None, ignore_env: bool = False, override: bool = False) -> "SingletonConfigManager":
        if override and config_dict is not None:
            cls.reset_instance()
            cls._instance = cls(config_dict or {}, ignore_env=ignore_env)
            logger.info("SingletonConfigManager instance reset with new config")
        elif cls._instance is None:
            cls._instance = cls(config_dict or {}, ignore_env=ignore_env)
        elif config_dict is not None:
            cls._instance._config.update(config_dict)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None


def get_global_conf() -> SingletonConfigManager:
    return SingletonConfigManager.instance()


def set_global_conf(config_dict: Optional[dict] = None, ignore_env: bool = False, override: bool = False) -> SingletonConfigManager:
    return SingletonConfigManager.instance(config_dict, ignore_env=ignore_env, override=override)
