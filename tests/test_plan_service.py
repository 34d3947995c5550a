# tests/test_plan_service.py
from unittest.mock import AsyncMock, MagicMock

import pytest

from config import settings
from core.gemini_client import GeminiAPIError
from models import PageType, PlanResult, ReferenceItem
from orchestration.plan_service import (
    DEFAULT_DESIGN_CONCEPTS,
    PlanService,
    build_pages,
    design_concepts_for,
    page_content_for,
    sample_plan,
)


def _plan(cover=True, bodies=2, outro=True):
    return PlanResult.model_validate(
        {
            "plan": {
                "cover": {"main_title": "Title"} if cover else None,
                "body": [{"summary": [f"point {i}"]} for i in range(bodies)],
                "outro": {"cta": "Bye"} if outro else None,
            }
        }
    )


def _retriever(loaded=True, items=None):
    retriever = MagicMock()
    retriever.rag_loaded = loaded
    retriever.search = AsyncMock(return_value=list(items or []))
    return retriever


def test_build_pages_order_and_labels():
    pages = build_pages(_plan())
    assert [p.label for p in pages] == ["Cover", "Body 1", "Body 2", "Closing"]
    assert [p.page_type for p in pages] == [
        PageType.COVER,
        PageType.BODY,
        PageType.BODY,
        PageType.OUTRO,
    ]
    assert [p.page_index for p in pages] == [0, 1, 2, 3]
    assert pages[2].body_number == 2


def test_build_pages_without_cover_or_outro():
    pages = build_pages(_plan(cover=False, outro=False, bodies=1))
    assert [(p.page_index, p.label) for p in pages] == [(0, "Body 1")]


def test_page_content_for_shifts_body_index_after_cover():
    plan = _plan()
    assert page_content_for(plan, 1, PageType.BODY) == {"summary": ["point 0"]}
    assert page_content_for(plan, 2, PageType.BODY) == {"summary": ["point 1"]}
    assert page_content_for(plan, 0, PageType.COVER) == {"main_title": "Title"}
    assert page_content_for(plan, 3, PageType.OUTRO) == {"cta": "Bye"}


def test_page_content_for_without_cover():
    plan = _plan(cover=False)
    assert page_content_for(plan, 0, PageType.BODY) == {"summary": ["point 0"]}


def test_page_content_for_unknown_page_uses_whole_plan():
    plan = _plan(bodies=1)
    assert page_content_for(plan, 9, PageType.BODY) == plan.plan.model_dump()


def test_design_concepts_default_when_missing():
    concepts = design_concepts_for(_plan())
    assert [c.name for c in concepts] == [c.name for c in DEFAULT_DESIGN_CONCEPTS]


def test_sample_plan_is_flagged():
    plan = sample_plan()
    assert plan.is_sample
    assert len(build_pages(plan)) == 5


@pytest.mark.asyncio
async def test_generate_plan_falls_back_to_sample():
    client = MagicMock()
    client.async_generate_plan = AsyncMock(side_effect=GeminiAPIError("down"))
    service = PlanService(client, _retriever(loaded=False))
    plan = await service.generate_plan("Announcement text")
    assert plan.is_sample
    service.retriever.search.assert_not_awaited()


@pytest.mark.asyncio
async def test_generate_plan_passes_style_examples():
    examples = [ReferenceItem(page_type="COVER", main_title="Example")]
    retriever = _retriever(items=examples)
    client = MagicMock()
    client.async_generate_plan = AsyncMock(return_value=_plan())
    document = "A" * 2000

    plan = await PlanService(client, retriever).generate_plan(document, "detailed")

    assert not plan.is_sample
    query, category, count = retriever.search.await_args.args
    assert len(query) == settings.PLAN_QUERY_CHARS
    assert category is None
    assert count == settings.PLAN_EXAMPLE_COUNT
    client.async_generate_plan.assert_awaited_once_with(document, "detailed", examples)
