#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Integration tests rendering through paka.cmark."""

import pytest

pytest.importorskip("paka.cmark")

from cmark_batch import (  # noqa: E402
    BatchConfig,
    CmarkEngine,
    to_commonmark,
    to_commonmark_each,
    to_html,
    to_html_each,
    to_latex,
    to_man,
    to_xml,
)


@pytest.fixture
def config():
    return BatchConfig(max_workers=4)


@pytest.mark.integration
class TestHtml:
    """HTML output."""

    def test_single(self, config):
        assert to_html("test", config=config) == "<p>test</p>\n"

    def test_batch(self, config):
        assert to_html(["test 1", "test 2"], config=config) == ["<p>test 1</p>\n", "<p>test 2</p>\n"]

    def test_smart_quotes(self, config):
        result = to_html('Use option to enable "smart" quotes.', ["smart"], config=config)

        assert result == "<p>Use option to enable “smart” quotes.</p>\n"

    def test_callback(self, config):
        assert to_html("test", lambda result: f"HTML is {result}".strip(), config=config) == "HTML is <p>test</p>"

    def test_join_callback_with_smart(self, config):
        join = lambda results: "<hr>".join(r.strip() for r in results)  # noqa: E731

        assert to_html(["en-dash --", "ellipsis..."], join, ["smart"], config=config) == (
            "<p>en-dash –</p><hr><p>ellipsis…</p>"
        )

    def test_each(self, config):
        result = to_html_each(["list", "test"], lambda r: f"HTML is {r.strip()}", config=config)

        assert result == ["HTML is <p>list</p>", "HTML is <p>test</p>"]

    def test_raw_html_kept_by_default(self, config):
        assert to_html("<div>x</div>", config=config) == "<div>x</div>\n"

    def test_safe_omits_raw_html(self, config):
        assert to_html("<div>x</div>", ["safe"], config=config) == "<!-- raw HTML omitted -->\n"

    def test_sourcepos(self, config):
        assert to_html("test", ["sourcepos"], config=config) == '<p data-sourcepos="1:1-1:4">test</p>\n'

    def test_hardbreaks(self, config):
        assert to_html("a\nb", ["hardbreaks"], config=config) == "<p>a<br />\nb</p>\n"

    def test_large_batch_keeps_order(self, config):
        documents = [f"document {i}" for i in range(200)]

        assert to_html(documents, config=config) == [f"<p>document {i}</p>\n" for i in range(200)]


@pytest.mark.integration
class TestOtherFormats:
    """XML, man, CommonMark and LaTeX output."""

    def test_xml(self, config):
        result = to_xml("test", config=config)

        assert result.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<!DOCTYPE document SYSTEM "CommonMark.dtd">')
        assert "<paragraph>" in result
        assert "test</text>" in result

    def test_man(self, config):
        assert to_man("test", config=config) == ".PP\ntest\n"

    def test_commonmark(self, config):
        assert to_commonmark(["test 1", "test 2"], config=config) == ["test 1\n", "test 2\n"]

    def test_commonmark_smart(self, config):
        assert to_commonmark('Use option to enable "smart" quotes.', ["smart"], config=config) == (
            "Use option to enable “smart” quotes.\n"
        )

    def test_commonmark_each(self, config):
        result = to_commonmark_each(["list", "test"], lambda r: f"CommonMark is {r.strip()}", config=config)

        assert result == ["CommonMark is list", "CommonMark is test"]

    def test_latex(self, config):
        assert to_latex("test", config=config) == "test\n"

    def test_latex_smart_quotes(self, config):
        assert to_latex('Use option to enable "smart" quotes.', ["smart"], config=config) == (
            "Use option to enable ``smart'' quotes.\n"
        )


@pytest.mark.integration
class TestCmarkEngineDirect:
    """Calling CmarkEngine without the dispatcher."""

    def test_render(self):
        assert CmarkEngine().render("*a*", 0, 1) == "<p><em>a</em></p>\n"

    def test_reserved_format_code(self):
        with pytest.raises(ValueError):
            CmarkEngine().render("a", 0, 0)

    def test_unknown_format_code(self):
        with pytest.raises(ValueError):
            CmarkEngine().render("a", 0, 9)

    def test_width_wraps_commonmark(self):
        text = " ".join(["word"] * 30)

        result = CmarkEngine(width=20).render(text, 0, 4)

        assert len(result.splitlines()) > 1
