"""
Steam process handling.

Steam rewrites config.vdf and localconfig.vdf on exit, so edits made while it
runs are lost. This service finds and stops the client.
"""

import logging
from typing import List

import psutil

logger = logging.getLogger(__name__)

STEAM_PROCESS_NAMES = ("steam", "steam.sh")


class SteamProcessError(Exception):
    """Steam could not be stopped."""


class SteamProcessService:
    """Find and stop the Steam client."""

    @staticmethod
    def get_steam_processes() -> List[psutil.Process]:
        """Return a list of psutil.Process objects for running Steam processes."""
        steam_procs = []
        for proc in psutil.process_iter(['pid', 'name']):
            try:
                name = proc.info['name']
                if name and name.lower() in STEAM_PROCESS_NAMES:
                    steam_procs.append(proc)
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return steam_procs

    @staticmethod
    def is_steam_running() -> bool:
        running = bool(SteamProcessService.get_steam_processes())
        logger.debug(f"Steam running: {running}")
        return running

    @staticmethod
    def stop_steam(timeout: int = 10) -> bool:
        """
        Terminate every Steam process and wait for them to exit.

        Processes still alive after timeout seconds are killed.

        Raises:
            SteamProcessError: if some process survives the kill
        """
        procs = SteamProcessService.get_steam_processes()
        if not procs:
            logger.debug("Steam not running, nothing to stop")
            return True

        logger.info(f"Stopping {len(procs)} Steam process(es)")
        for proc in procs:
            try:
                proc.terminate()
            except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
                logger.debug(f"terminate({proc.pid}) failed: {e}")

        _, alive = psutil.wait_procs(procs, timeout=timeout)
        if alive:
            logger.warning(f"{len(alive)} Steam process(es) ignored SIGTERM, killing")
            for proc in alive:
                try:
                    proc.kill()
                except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
                    logger.debug(f"kill({proc.pid}) failed: {e}")
            _, alive = psutil.wait_procs(alive, timeout=timeout)

        if alive:
            raise SteamProcessError(
                f"Steam is still running (pid {', '.join(str(p.pid) for p in alive)})"
            )
        logger.info("Steam stopped")
        return True
