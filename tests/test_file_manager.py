# tests/test_file_manager.py
import json

import httpx
import pytest

from models import GeneratedImage, PageType
from orchestration.generation_stats import GenerationStats
from storage.file_manager import FileManager, decode_data_uri
from utils.placeholder import create_placeholder_image


def _image(page_type, label, url):
    return GeneratedImage(id=f"task-{label}", url=url, page_type=page_type, label=label)


def test_decode_data_uri():
    assert decode_data_uri("data:image/png;base64,QUJD") == b"ABC"
    with pytest.raises(ValueError):
        decode_data_uri("https://example.com/a.png")


@pytest.mark.asyncio
async def test_save_images_names_files_by_type_and_position(tmp_path):
    manager = FileManager(str(tmp_path / "images"), str(tmp_path / "stats.json"))
    images = [
        _image(PageType.COVER, "Cover", create_placeholder_image("COVER", "Cover", "4:5")),
        _image(PageType.BODY, "Body 1", "data:image/png;base64,QUJD"),
    ]
    paths = await manager.save_images(images)

    assert [p.rsplit("/", 1)[-1] for p in paths] == [
        "cardnews_cover_1.png",
        "cardnews_body_2.png",
    ]
    with open(paths[0], "rb") as f:
        assert f.read(4) == b"\x89PNG"
    with open(paths[1], "rb") as f:
        assert f.read() == b"ABC"


@pytest.mark.asyncio
async def test_save_images_downloads_remote_urls(tmp_path):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"IMG"))
    )
    manager = FileManager(str(tmp_path), str(tmp_path / "stats.json"))
    paths = await manager.save_images(
        [_image(PageType.OUTRO, "Closing", "https://example.com/out.png")], client
    )
    with open(paths[0], "rb") as f:
        assert f.read() == b"IMG"


@pytest.mark.asyncio
async def test_save_images_skips_unreadable_records(tmp_path):
    manager = FileManager(str(tmp_path), str(tmp_path / "stats.json"))
    paths = await manager.save_images(
        [_image(PageType.BODY, "Body 1", "data:text/plain,hello")]
    )
    assert paths == []


def test_stats_round_trip(tmp_path):
    manager = FileManager(str(tmp_path), str(tmp_path / "out" / "stats.json"))
    assert manager.load_stats() == GenerationStats()
    manager.save_stats(GenerationStats(files=2, plans=1, images=7))
    assert manager.load_stats() == GenerationStats(files=2, plans=1, images=7)


def test_load_stats_ignores_corrupt_file(tmp_path):
    stats_path = tmp_path / "stats.json"
    stats_path.write_text("{broken", encoding="utf-8")
    manager = FileManager(str(tmp_path), str(stats_path))
    assert manager.load_stats() == GenerationStats()


def test_load_stats_ignores_non_integer_values(tmp_path):
    stats_path = tmp_path / "stats.json"
    stats_path.write_text(json.dumps({"files": "3", "images": 4}), encoding="utf-8")
    stats = FileManager(str(tmp_path), str(stats_path)).load_stats()
    assert stats.files == 0 and stats.images == 4
