from __future__ import annotations

import asyncio
import time
from typing import Optional

from rich.console import Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from config import settings


class RichDisplayManager:
    """Live panel showing queue progress for a generation run."""

    def __init__(self, enabled: bool | None = None) -> None:
        self.live: Optional[Live] = None
        self.group: Optional[Group] = None
        self.status_text_current_page: Text = Text("Current Page: N/A")
        self.status_text_step: Text = Text("Current Step: Initializing...")
        self.status_text_queue: Text = Text("Queued Tasks: 0")
        self.status_text_progress: Text = Text("Completed: 0/0")
        self.status_text_requests: Text = Text("API Requests: 0")
        self.status_text_elapsed_time: Text = Text("Elapsed Time: 0s")
        self.run_start_time: float = 0.0
        self.request_count: int = 0
        self._stop_event: asyncio.Event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

        if enabled is None:
            enabled = settings.ENABLE_RICH_PROGRESS
        if enabled:
            self.group = Group(
                self.status_text_current_page,
                self.status_text_step,
                self.status_text_queue,
                self.status_text_progress,
                self.status_text_requests,
                self.status_text_elapsed_time,
            )
            self.live = Live(
                Panel(
                    self.group,
                    title="Card News Progress",
                    border_style="magenta",
                    expand=True,
                ),
                refresh_per_second=4,
                transient=False,
                redirect_stdout=False,
                redirect_stderr=False,
            )

    def start(self) -> None:
        self.run_start_time = time.time()
        if self.live:
            self.live.start()
            self._stop_event.clear()
            self._task = asyncio.create_task(self._auto_refresh())

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task:
            await self._task
            self._task = None
        if self.live and self.live.is_started:
            self.live.stop()

    async def _auto_refresh(self) -> None:
        while not self._stop_event.is_set():
            self.update()
            await asyncio.sleep(1)

    def update(
        self,
        current_page: Optional[str] = None,
        step: Optional[str] = None,
        queued: Optional[int] = None,
        completed: Optional[int] = None,
        total: Optional[int] = None,
        request_count: Optional[int] = None,
    ) -> None:
        if request_count is not None:
            self.request_count = request_count
        if not (self.live and self.group):
            return
        if current_page is not None:
            self.status_text_current_page.plain = f"Current Page: {current_page}"
        if step is not None:
            self.status_text_step.plain = f"Current Step: {step}"
        if queued is not None:
            self.status_text_queue.plain = f"Queued Tasks: {queued}"
        if completed is not None and total is not None:
            self.status_text_progress.plain = f"Completed: {completed}/{total}"
        self.status_text_requests.plain = f"API Requests: {self.request_count}"
        elapsed_seconds = time.time() - self.run_start_time if self.run_start_time else 0
        self.status_text_elapsed_time.plain = (
            f"Elapsed Time: {time.strftime('%H:%M:%S', time.gmtime(elapsed_seconds))}"
        )
