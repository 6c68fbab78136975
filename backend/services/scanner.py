"""
Page Scanner - Drive annotation over the diff regions of a page
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable

from models.annotate import LineResult, RegionResult, RegionState
from models.change import ChangeLog
from models.diff import DiffIdentity
from models.settings import Settings

from .change_log_resolver import ChangeLogResolver
from .errors import InvalidPage, NotFound, RequestFailed
from .github_client import GitHubClient
from .overlay import render
from .page import PageView, RegionView, is_diff_page, parse_line_anchor, parse_region_hash
from .projection import project

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PageScanner:
    """Annotate unseen regions of one page view, one pass at a time.

    Regions move unseen -> processing -> done, and back to unseen when a
    transient failure should be retried by a later pass.
    """

    WAIT_MAX_ATTEMPTS = 10
    WAIT_STEP_MS = 100
    WAIT_CAP_MS = 2000

    def __init__(self, client: GitHubClient, settings: Settings, sleep: Sleep = asyncio.sleep):
        self.client = client
        self.settings = settings
        self._sleep = sleep
        self._in_flight = False
        self._resolver: ChangeLogResolver | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def resolver_for(self, identity: DiffIdentity) -> ChangeLogResolver:
        """Resolver for the identity; a changed identity drops every cache"""
        if self._resolver is None or self._resolver.identity != identity:
            self._resolver = ChangeLogResolver(identity, self.client)
        return self._resolver

    # ========== Passes ==========

    async def scan(self, page: PageView) -> AsyncIterator[RegionResult]:
        """Run one pass over the page, yielding each region's outcome in document order.

        Returns immediately when another pass is still running.
        """
        if self._in_flight:
            return
        self._in_flight = True
        try:
            if not self.settings.github_integration or not is_diff_page(page.url):
                return

            try:
                identity = page.identity()
            except InvalidPage as e:
                logger.debug("[PageScanner] No diff identity for %s: %s", page.url, e)
                return

            resolver = self.resolver_for(identity)
            for region in page.unseen_regions():
                yield await self._process_region(region, resolver)
        finally:
            self._in_flight = False

    async def scan_once(self, page: PageView) -> list[RegionResult]:
        return [result async for result in self.scan(page)]

    async def _process_region(self, region: RegionView, resolver: ChangeLogResolver) -> RegionResult:
        if not region.lines:
            # Table rendered before its cells; try again next pass
            return RegionResult(anchor=region.anchor, state=region.state, status="pending")

        region.state = RegionState.PROCESSING
        content_hash = parse_region_hash(region.anchor)
        if content_hash is None:
            region.state = RegionState.DONE
            return RegionResult(anchor=region.anchor, state=region.state, status="skipped")

        try:
            change_log = await resolver.resolve(content_hash)
            lines = self._annotate_lines(region, content_hash, change_log)
        except NotFound as e:
            logger.debug("[PageScanner] %s", e)
            region.state = RegionState.DONE
            return RegionResult(anchor=region.anchor, state=region.state, status="not_found")
        except RequestFailed as e:
            logger.debug("[PageScanner] Error fetching change data for hash %s: %s", content_hash, e)
            region.state = RegionState.UNSEEN
            return RegionResult(anchor=region.anchor, state=region.state, status="failed", error=str(e))
        except Exception as e:
            logger.exception("[PageScanner] Error processing region %s", region.anchor)
            region.state = RegionState.UNSEEN
            return RegionResult(anchor=region.anchor, state=region.state, status="failed", error=str(e))

        region.state = RegionState.DONE
        return RegionResult(anchor=region.anchor, state=region.state, status="annotated", lines=lines)

    def _annotate_lines(self, region: RegionView, content_hash: str, change_log: ChangeLog) -> list[LineResult]:
        results = []
        for line in region.lines:
            parsed = parse_line_anchor(line.anchor)
            if parsed is None or parsed[0] != content_hash:
                continue

            ranges = project(change_log, parsed[1], len(line.text))
            if not ranges:
                continue

            segments = render(line.text, ranges)
            line.apply_segments(segments)
            results.append(LineResult(anchor=line.anchor, segments=segments))
        return results

    # ========== Scheduling ==========

    async def run(self, page: PageView, stop: asyncio.Event) -> None:
        """Start a pass every scan interval until stop is set.

        Ticks do not wait for the previous pass; an overlapping pass no-ops.
        """
        tasks: set[asyncio.Task] = set()
        while not stop.is_set():
            task = asyncio.create_task(self.scan_once(page))
            tasks.add(task)
            task.add_done_callback(tasks.discard)
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.settings.scan_interval)
            except asyncio.TimeoutError:
                pass
        if tasks:
            await asyncio.gather(*tasks)

    async def wait_for_content(self, page: PageView, max_attempts: int = WAIT_MAX_ATTEMPTS) -> bool:
        """Poll until the page has an unseen region, backing off 100ms per attempt up to 2s"""
        for attempt in range(1, max_attempts + 1):
            if page.unseen_regions():
                return True
            if attempt < max_attempts:
                await self._sleep(min(self.WAIT_STEP_MS * attempt, self.WAIT_CAP_MS) / 1000)

        logger.debug("[PageScanner] Timed out waiting for diff content to load")
        return False
