"""
Base collector class that all metric collectors inherit from.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod

from healthlog.config import Config
from healthlog.snapshot import MetricsBundle

logger = logging.getLogger(__name__)


class BaseCollector(ABC):
    """
    Abstract base class for all metric collectors.

    Subclasses must implement the `collect` method and return a
    MetricsBundle with every field they can measure; anything left
    unset keeps its zero/False default.
    """

    name: str = "base"
    description: str = "Base collector"

    def __init__(self, config: Config | None = None):
        self.config = config or Config()
        self.logger = logging.getLogger(f"{__name__}.{self.name}")

    @abstractmethod
    def collect(self) -> MetricsBundle:
        """
        Collect and return metrics for one snapshot.

        Returns:
            MetricsBundle with the measured values.
        """
        pass

    def __call__(self) -> MetricsBundle:
        return self.collect()

    def run_command(
        self,
        cmd: list[str],
        timeout: int = 30,
        check: bool = False,
    ) -> tuple[str, str, int]:
        """
        Run a shell command and return output.

        Args:
            cmd: Command and arguments as list.
            timeout: Timeout in seconds.
            check: If True, raise on non-zero exit.

        Returns:
            Tuple of (stdout, stderr, returncode).
        """
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=check,
            )
            return result.stdout, result.stderr, result.returncode
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Command timed out: {' '.join(cmd)}")
            return "", "Command timed out", -1
        except FileNotFoundError:
            self.logger.warning(f"Command not found: {cmd[0]}")
            return "", f"Command not found: {cmd[0]}", -1
        except subprocess.CalledProcessError as e:
            return e.stdout or "", e.stderr or "", e.returncode

    def read_file(self, path: str, default: str = "") -> str:
        """
        Read a file and return its contents.

        Args:
            path: Path to the file.
            default: Default value if file cannot be read.

        Returns:
            File contents or default value.
        """
        try:
            with open(path) as f:
                return f.read()
        except OSError as e:
            self.logger.debug(f"Could not read {path}: {e}")
            return default
