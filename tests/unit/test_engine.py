#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the rendering engine boundary."""

import sys
import types
from concurrent.futures import ThreadPoolExecutor

import pytest
from utils import FakeEngine

from cmark_batch.engine import CmarkEngine, RenderEngine, SerializedEngine, get_default_engine, set_default_engine
from cmark_batch.exceptions import DependencyError, UnknownOptionError
from cmark_batch.options import OutputFormat, RenderOption


@pytest.fixture
def stub_cmark(monkeypatch):
    """Install a recording stand-in for ``paka.cmark``.

    Every ``to_<format>`` function returns ``"<name>:<text>"`` and appends
    ``(name, text, kwargs)`` to ``stub_cmark.calls``.
    """
    cmark = types.ModuleType("paka.cmark")
    cmark.calls = []

    def recorder(name):
        def render(text, **kwargs):
            cmark.calls.append((name, text, kwargs))
            return f"{name}:{text}"

        return render

    for name in ("to_html", "to_xml", "to_man", "to_commonmark", "to_latex"):
        setattr(cmark, name, recorder(name))

    paka = types.ModuleType("paka")
    paka.__path__ = []
    paka.cmark = cmark
    monkeypatch.setitem(sys.modules, "paka", paka)
    monkeypatch.setitem(sys.modules, "paka.cmark", cmark)
    monkeypatch.setattr("cmark_batch.utils.decorators.check_version_requirement", lambda name, spec: (True, "2.0"))
    return cmark


@pytest.mark.unit
class TestTranslateOptions:
    """Tests for mapping option bits onto paka.cmark keywords."""

    def test_default_keeps_raw_html_and_soft_breaks(self):
        assert CmarkEngine.translate_options(0) == {"breaks": True, "safe": False, "smart": False, "sourcepos": False}

    def test_safe(self):
        assert CmarkEngine.translate_options(int(RenderOption.SAFE))["safe"] is True

    def test_hardbreaks(self):
        assert CmarkEngine.translate_options(int(RenderOption.HARDBREAKS))["breaks"] == "hard"

    def test_every_flag(self):
        assert CmarkEngine.translate_options(63) == {"breaks": "hard", "safe": True, "smart": True, "sourcepos": True}

    def test_normalize_and_validate_utf8_need_no_keyword(self):
        bits = int(RenderOption.NORMALIZE | RenderOption.VALIDATE_UTF8)

        assert CmarkEngine.translate_options(bits) == CmarkEngine.translate_options(0)

    def test_unknown_bits_raise(self):
        with pytest.raises(UnknownOptionError):
            CmarkEngine.translate_options(64)


@pytest.mark.unit
class TestRenderKwargs:
    """Tests for the per-format keyword arguments."""

    def test_html_without_sourcepos(self):
        assert CmarkEngine().render_kwargs(0, OutputFormat.HTML) == {"breaks": True, "safe": False, "smart": False}

    def test_xml_with_sourcepos(self):
        kwargs = CmarkEngine().render_kwargs(int(RenderOption.SOURCEPOS), OutputFormat.XML)

        assert kwargs["sourcepos"] is True
        assert "width" not in kwargs

    @pytest.mark.parametrize("target", [OutputFormat.MAN, OutputFormat.COMMONMARK, OutputFormat.LATEX])
    def test_text_formats_take_width_not_sourcepos(self, target):
        kwargs = CmarkEngine(width=72).render_kwargs(int(RenderOption.SOURCEPOS), target)

        assert kwargs["width"] == 72
        assert "sourcepos" not in kwargs


@pytest.mark.unit
class TestCmarkEngine:
    """Tests for CmarkEngine against a stand-in paka.cmark module."""

    def test_negative_width_rejected(self):
        with pytest.raises(ValueError, match="width"):
            CmarkEngine(width=-1)

    def test_satisfies_protocol(self):
        assert isinstance(CmarkEngine(), RenderEngine)
        assert isinstance(FakeEngine(), RenderEngine)

    def test_repr(self):
        assert repr(CmarkEngine(width=80)) == "CmarkEngine(width=80)"

    @pytest.mark.parametrize(
        "format_code,function",
        [(1, "to_html"), (2, "to_xml"), (3, "to_man"), (4, "to_commonmark"), (5, "to_latex")],
    )
    def test_render_calls_matching_function(self, stub_cmark, format_code, function):
        assert CmarkEngine().render("test", 0, format_code) == f"{function}:test"
        assert [name for name, _, _ in stub_cmark.calls] == [function]

    def test_render_passes_translated_options(self, stub_cmark):
        bits = int(RenderOption.SMART | RenderOption.SAFE | RenderOption.SOURCEPOS | RenderOption.HARDBREAKS)

        CmarkEngine().render("*a*", bits, 1)

        assert stub_cmark.calls == [
            ("to_html", "*a*", {"breaks": "hard", "safe": True, "smart": True, "sourcepos": True})
        ]

    def test_render_passes_width_to_text_formats(self, stub_cmark):
        CmarkEngine(width=40).render("a", int(RenderOption.SMART), 4)

        assert stub_cmark.calls == [("to_commonmark", "a", {"breaks": True, "safe": False, "smart": True, "width": 40})]

    def test_reserved_format_code(self, stub_cmark):
        with pytest.raises(ValueError, match="none"):
            CmarkEngine().render("a", 0, 0)
        assert stub_cmark.calls == []

    def test_unknown_format_code(self, stub_cmark):
        with pytest.raises(ValueError):
            CmarkEngine().render("a", 0, 9)

    def test_unknown_option_bits(self, stub_cmark):
        with pytest.raises(UnknownOptionError):
            CmarkEngine().render("a", 128, 1)
        assert stub_cmark.calls == []

    def test_missing_paka_cmark_raises_dependency_error(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "paka", None)
        monkeypatch.setitem(sys.modules, "paka.cmark", None)

        with pytest.raises(DependencyError) as exc_info:
            CmarkEngine().render("test", 0, 1)

        assert exc_info.value.missing_packages == [("paka.cmark", ">=2.0")]
        assert "pip install" in str(exc_info.value)


@pytest.mark.unit
class TestSerializedEngine:
    """Tests for SerializedEngine."""

    def test_delegates(self):
        inner = FakeEngine()
        engine = SerializedEngine(inner)

        assert engine.render("a", 8, 2) == FakeEngine.expected("a", 8, 2)
        assert inner.calls == [("a", 8, 2)]

    def test_calls_never_overlap(self):
        sources = [f"doc {i}" for i in range(8)]
        inner = FakeEngine(delays={source: 0.02 for source in sources})
        engine = SerializedEngine(inner)

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda s: engine.render(s, 0, 1), sources))

        assert results == [FakeEngine.expected(s) for s in sources]
        assert inner.max_active == 1


@pytest.mark.unit
class TestDefaultEngine:
    """Tests for the process-wide default engine."""

    def test_lazily_created_cmark_engine(self):
        engine = get_default_engine()

        assert isinstance(engine, CmarkEngine)
        assert get_default_engine() is engine

    def test_override_and_restore(self, fake_engine):
        set_default_engine(fake_engine)
        assert get_default_engine() is fake_engine

        set_default_engine(None)
        assert isinstance(get_default_engine(), CmarkEngine)

    def test_rejects_objects_without_render(self):
        with pytest.raises(TypeError):
            set_default_engine(object())

    def test_width_builds_separate_cmark_engine(self):
        engine = get_default_engine(width=72)

        assert isinstance(engine, CmarkEngine)
        assert engine.width == 72
        assert engine is not get_default_engine()

    def test_installed_engine_wins_over_width(self, fake_engine):
        set_default_engine(fake_engine)

        assert get_default_engine(width=72) is fake_engine
