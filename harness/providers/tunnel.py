"""
Local Tunnel Process
====================

Runs a vendor tunnel binary (BrowserStackLocal, Sauce Connect) for the
lifetime of a provider. Started from ``init()`` only when a binary path is
configured, stopped from ``cleanup()``; when no binary is configured the
tunnel is assumed to be managed outside the harness.
"""

import asyncio
import subprocess
from typing import Optional

from harness.exceptions import ProviderConfigurationError
from harness.utils.logger import get_logger

logger = get_logger(__name__)


class TunnelProcess:
    """Background tunnel subprocess with idempotent start/stop."""

    def __init__(
        self,
        provider: str,
        command: list[str],
        ready_delay: float = 5.0,
        stop_timeout: float = 10.0,
    ) -> None:
        """
        Args:
            provider: Owning provider name (for errors and logs).
            command: Full command line; ``command[0]`` is the binary.
            ready_delay: Seconds to wait before checking the tunnel stayed up.
            stop_timeout: Seconds to wait for a graceful exit before killing.
        """
        self.provider = provider
        self.command = command
        self.ready_delay = ready_delay
        self.stop_timeout = stop_timeout
        self._process: Optional[subprocess.Popen] = None

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    async def start(self) -> None:
        """
        Launch the tunnel if it is not already running.

        Raises:
            ProviderConfigurationError: If the binary is missing or exits early.
        """
        if self.running:
            return

        logger.info("Starting tunnel", provider=self.provider, binary=self.command[0])
        try:
            self._process = subprocess.Popen(
                self.command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise ProviderConfigurationError(
                self.provider, f"cannot start tunnel binary {self.command[0]}: {e}"
            ) from e

        await asyncio.sleep(self.ready_delay)
        if not self.running:
            code = self._process.returncode
            self._process = None
            raise ProviderConfigurationError(
                self.provider, f"tunnel exited during startup with code {code}"
            )
        logger.info("Tunnel running", provider=self.provider, pid=self._process.pid)

    async def stop(self) -> None:
        """Terminate the tunnel; kill it if it does not exit in time."""
        process, self._process = self._process, None
        if process is None or process.poll() is not None:
            return

        process.terminate()
        try:
            await asyncio.to_thread(process.wait, self.stop_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Tunnel did not exit, killing", provider=self.provider)
            process.kill()
            await asyncio.to_thread(process.wait)
        logger.info("Tunnel stopped", provider=self.provider)
