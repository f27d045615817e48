from __future__ import annotations

import pytest
from asgiref.sync import async_to_sync
from django.template import engines

from turbo_push.exceptions import RenderError
from turbo_push.exceptions import ViewNotFound
from turbo_push.streams.context import build_from_request
from turbo_push.streams.renderer import FragmentRenderer
from turbo_push.streams.renderer import RenderedFragment


class Exploding:
    @property
    def explode(self):
        msg = "boom"
        raise RuntimeError(msg)


@pytest.fixture
def renderer():
    return FragmentRenderer(engines["django"])


def _render(renderer, request, name, model=None, **kwargs):
    context = build_from_request(request, name, model, **kwargs)
    return async_to_sync(renderer.render)(context)


def test_renders_full_fragment(renderer, rf):
    fragment = _render(renderer, rf.get("/"), "fragments/message.turbo_stream.html", "hi")

    assert isinstance(fragment, RenderedFragment)
    assert fragment.template_name == "fragments/message.turbo_stream.html"
    assert str(fragment) == fragment.html
    assert fragment.html.startswith('<turbo-stream action="append" target="messages">')
    assert '<div data-testid="message">hi</div>' in fragment.html


def test_model_is_autoescaped(renderer, rf):
    fragment = _render(renderer, rf.get("/"), "fragments/message.turbo_stream.html", "<b>")

    assert "&lt;b&gt;" in fragment.html


def test_malformed_markup_passes_through(renderer, rf):
    fragment = _render(renderer, rf.get("/"), "fragments/malformed.turbo_stream.html", "x")

    assert fragment.html == "<div><span>x\n"


def test_request_and_view_data_reach_template(renderer, rf):
    fragment = _render(
        renderer,
        rf.get("/somewhere/"),
        "fragments/context.turbo_stream.html",
        view_data={"flavour": "mint"},
    )

    assert "/somewhere/|mint" in fragment.html


def test_unknown_template_is_view_not_found(renderer, rf):
    with pytest.raises(ViewNotFound) as excinfo:
        _render(renderer, rf.get("/"), "fragments/missing.turbo_stream.html")

    assert excinfo.value.tried == ("fragments/missing.turbo_stream.html",)


def test_syntax_error_is_render_error(renderer, rf):
    with pytest.raises(RenderError):
        _render(renderer, rf.get("/"), "fragments/broken.turbo_stream.html")


def test_exception_inside_template_is_render_error(renderer, rf):
    with pytest.raises(RenderError) as excinfo:
        _render(renderer, rf.get("/"), "fragments/raises.turbo_stream.html", Exploding())

    assert isinstance(excinfo.value.__cause__, RuntimeError)
