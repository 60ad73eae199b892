"""Periodic self ping that keeps free-tier hosts awake"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class KeepAlivePinger:
    def __init__(self, client: httpx.AsyncClient, url: str, interval: int):
        self.client = client
        self.url = url
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    async def ping(self) -> bool:
        try:
            response = await self.client.get(self.url)
        except httpx.HTTPError as e:
            logger.warning(f"Keep-alive ping to {self.url} failed: {e}")
            return False
        logger.debug(f"Keep-alive ping to {self.url}: {response.status_code}")
        return response.is_success

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.ping()

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            logger.info(f"Keep-alive pinger started for {self.url} every {self.interval}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Keep-alive pinger stopped")
