# tests/test_generation_stats.py
import logging

from orchestration.generation_stats import GenerationStats, StatKind


def test_record_increments_counter(caplog):
    caplog.set_level(logging.INFO)
    stats = GenerationStats()
    stats.record(StatKind.IMAGES)
    stats.record("files", 2)
    assert stats.to_dict() == {"files": 2, "plans": 0, "images": 1}
    assert any("activity" in record.message.lower() for record in caplog.records)


def test_record_unknown_stat_is_ignored(caplog):
    caplog.set_level(logging.WARNING)
    stats = GenerationStats()
    stats.record("pages")
    assert stats == GenerationStats()
    assert any("unknown stat" in record.message.lower() for record in caplog.records)
