"""
SLA External Service Integrations
==================================

External services for SLA escalation:
- YAML config file watcher (watchdog hot reload)
- APScheduler for the recurring sweep
"""

import threading
from pathlib import Path
from typing import Awaitable, Callable, Optional

import yaml
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from supportdesk.core import ConfigurationException
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.sla.application import ISLAConfigProvider
from supportdesk.sla.domain import SLAConfig

logger = get_logger(__name__)


class StaticSLAConfigProvider(ISLAConfigProvider):
    """Provider returning a fixed configuration (settings only, or tests)."""

    def __init__(self, config: SLAConfig):
        self._config = config

    def get_config(self) -> SLAConfig:
        return self._config


class ConfigFileHandler(FileSystemEventHandler):
    """
    Watchdog event handler for SLA config file changes.

    Editors that save atomically write a temp file and rename it over the
    config, which arrives as a created or moved event rather than modified.
    """

    def __init__(self, config_manager: "SLAConfigManager", config_path: Path):
        self.config_manager = config_manager
        self.config_path = config_path
        super().__init__()

    def _reload_if_config(self, event, path) -> None:
        if event.is_directory or not path:
            return
        if Path(path).resolve() == self.config_path.resolve():
            logger.info(f"SLA config file changed: {path}")
            self.config_manager.reload()

    def on_modified(self, event):
        self._reload_if_config(event, event.src_path)

    def on_created(self, event):
        self._reload_if_config(event, event.src_path)

    def on_moved(self, event):
        self._reload_if_config(event, event.dest_path)


class SLAConfigManager(ISLAConfigProvider):
    """
    Thread-safe SLA configuration manager with hot-reload support.

    The YAML file holds ``vip_hours`` and/or ``normal_hours``; keys it leaves
    out keep the values from ``defaults``. Uses watchdog to monitor file
    changes and reload configuration without restarting the service.
    """

    def __init__(self, defaults: Optional[SLAConfig] = None):
        self._defaults = defaults or SLAConfig()
        self._config: Optional[SLAConfig] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Optional[Path]) -> SLAConfig:
        """
        Initial configuration load.

        Raises:
            ConfigurationException: The file exists but is not a valid SLA config
        """
        self._path = path
        try:
            config = self._load_from_file(path)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            raise ConfigurationException(
                f"Invalid SLA config file: {path}",
                {"error": str(e)}
            ) from e

        with self._lock:
            self._config = config
        return config

    def _load_from_file(self, path: Optional[Path]) -> SLAConfig:
        """Load and parse YAML config file, merged over the defaults."""
        if path is None:
            return self._defaults

        if not path.exists():
            logger.warning(f"SLA config file not found: {path}, using defaults")
            return self._defaults

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationException(
                f"SLA config file must hold a mapping: {path}",
                {"path": str(path)}
            )

        return SLAConfig(**{**self._defaults.model_dump(), **data})

    def reload(self) -> bool:
        """
        Reload configuration from file.

        A broken file leaves the previous configuration in place.
        """
        if self._path is None:
            return False

        try:
            new_config = self._load_from_file(self._path)
        except (OSError, yaml.YAMLError, ValidationError, ConfigurationException) as e:
            logger.error(
                "Failed to reload SLA config, keeping previous values",
                extra={"path": str(self._path), "error": str(e)}
            )
            return False

        with self._lock:
            self._config = new_config
        logger.info(
            "SLA configuration reloaded",
            extra={"vip_hours": new_config.vip_hours, "normal_hours": new_config.normal_hours}
        )
        return True

    def start_watching(self) -> None:
        """
        Start watching configuration file for changes.

        Skips watching if no file is configured or the file doesn't exist.
        """
        if self._path is None or not self._path.exists():
            logger.info("No SLA config file to watch, using static SLA windows")
            return

        try:
            self._observer = Observer()
            handler = ConfigFileHandler(self, self._path)
            self._observer.schedule(
                handler,
                str(self._path.parent),
                recursive=False
            )
            self._observer.start()
            logger.info(f"Started watching SLA config file: {self._path}")
        except OSError as e:
            # File watching not supported (e.g., in Docker containers)
            logger.warning(
                f"File watching not available, using static config: {e}"
            )
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching configuration file (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    def get_config(self) -> SLAConfig:
        """Get current configuration."""
        with self._lock:
            if self._config is None:
                raise RuntimeError("SLA configuration not loaded")
            return self._config


class SLAScheduler:
    """
    Wrapper for APScheduler running the SLA sweep.

    Manages the lifecycle of the scheduler and its single job. The job never
    overlaps with itself.
    """

    JOB_ID = "sla_sweep"

    def __init__(self, interval_seconds: int = 300):
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    async def start(self, job_func: Callable[[], Awaitable[None]]) -> None:
        """Start the scheduler with the given job function."""
        if self._running:
            logger.warning("SLA scheduler already running")
            return

        self._scheduler = AsyncIOScheduler()

        self._scheduler.add_job(
            job_func,
            "interval",
            seconds=self.interval_seconds,
            id=self.JOB_ID,
            name="SLA Escalation Sweep",
            misfire_grace_time=60,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        self._scheduler.start()
        self._running = True

        logger.info(
            "SLA scheduler started",
            extra={"interval_seconds": self.interval_seconds}
        )

    async def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)

        self._running = False
        logger.info("SLA scheduler stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running
