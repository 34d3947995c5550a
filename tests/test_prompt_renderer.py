import prompt_renderer
from jinja2 import DictLoader, Environment
from pydantic import BaseModel

from models import DesignConcept


def test_render_prompt_with_custom_env(monkeypatch):
    env = Environment(
        loader=DictLoader({"greet.j2": "  Hello {{ name }}\n"}), autoescape=False
    )
    monkeypatch.setattr(prompt_renderer, "_env", env)
    assert prompt_renderer.render_prompt("greet.j2", {"name": "Bob"}) == "Hello Bob"


class Palette(BaseModel):
    name: str
    note: str | None = None


def test_compact_json_keeps_unicode_and_models():
    rendered = prompt_renderer._compact_json({"title": "봄 축제", "palette": Palette(name="pastel")})
    assert rendered == '{"title": "봄 축제", "palette": {"name": "pastel"}}'


def test_design_prompt_omits_empty_sections():
    prompt = prompt_renderer.render_prompt(
        "design_prompt.j2",
        {
            "page_type": "COVER",
            "content": "{}",
            "aspect_ratio": "4:5",
            "palette": None,
            "concept": None,
            "feedback": None,
        },
    )
    assert "Palette consistency" not in prompt
    assert "User instructions" not in prompt
    assert "'4:5'" in prompt


def test_design_prompt_includes_concept():
    prompt = prompt_renderer.render_prompt(
        "design_prompt.j2",
        {
            "page_type": "BODY",
            "content": "{}",
            "aspect_ratio": "1:1",
            "palette": "soft green",
            "concept": DesignConcept(name="Bold Graphic", description="Big type"),
            "feedback": None,
        },
    )
    assert "soft green" in prompt
    assert "Bold Graphic" in prompt


def test_plan_prompt_without_examples():
    prompt = prompt_renderer.render_prompt(
        "plan_prompt.j2", {"document": "Notice", "detailed": False, "examples": []}
    )
    assert "No examples" in prompt
    assert "Notice" in prompt
