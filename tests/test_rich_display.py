# tests/test_rich_display.py
import pytest

from ui.rich_display import RichDisplayManager


def test_disabled_display_is_noop():
    display = RichDisplayManager(enabled=False)
    display.update(current_page="Cover", queued=3, request_count=2)
    assert display.live is None
    assert display.request_count == 2
    assert display.status_text_current_page.plain == "Current Page: N/A"


def test_enabled_display_updates_text():
    display = RichDisplayManager(enabled=True)
    display.update(
        current_page="Body 1", step="GENERATE started", queued=2, completed=1, total=3
    )
    assert display.status_text_current_page.plain == "Current Page: Body 1"
    assert display.status_text_queue.plain == "Queued Tasks: 2"
    assert display.status_text_progress.plain == "Completed: 1/3"


@pytest.mark.asyncio
async def test_stop_without_start():
    display = RichDisplayManager(enabled=False)
    display.start()
    await display.stop()
    assert display.run_start_time > 0
