#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for dependency checking and timing helpers."""

import logging

import pytest

from cmark_batch.exceptions import DependencyError
from cmark_batch.utils import check_version_requirement, debug_timer, get_package_version, requires_dependencies


@pytest.mark.unit
class TestPackages:
    """Tests for package version helpers."""

    def test_installed_package_version(self):
        assert get_package_version("pytest")

    def test_missing_package_version(self):
        assert get_package_version("definitely-not-installed-pkg-xyz") is None

    def test_requirement_met(self):
        met, version = check_version_requirement("pytest", ">=1.0")

        assert met
        assert version

    def test_requirement_for_missing_package(self):
        assert check_version_requirement("definitely-not-installed-pkg-xyz", ">=1.0") == (False, None)

    def test_invalid_specifier(self):
        with pytest.raises(ValueError):
            check_version_requirement("pytest", "not a spec")


@pytest.mark.unit
class TestRequiresDependencies:
    """Tests for the requires_dependencies decorator."""

    def test_runs_when_available(self):
        @requires_dependencies("test", [("pytest", "pytest", "")])
        def render():
            return "ok"

        assert render() == "ok"

    def test_missing_module(self):
        @requires_dependencies("test", [("no-such-dist", "no_such_module_xyz", ">=1.0")])
        def render():
            return "ok"

        with pytest.raises(DependencyError) as exc_info:
            render()

        assert exc_info.value.missing_packages == [("no-such-dist", ">=1.0")]
        assert isinstance(exc_info.value.__cause__, ImportError)

    def test_version_mismatch(self):
        @requires_dependencies("test", [("pytest", "pytest", ">=9999")])
        def render():
            return "ok"

        with pytest.raises(DependencyError) as exc_info:
            render()

        assert exc_info.value.version_mismatches[0][:2] == ("pytest", ">=9999")

    def test_preserves_metadata(self):
        @requires_dependencies("test", [])
        def render():
            """Render something."""

        assert render.__name__ == "render"
        assert render.__doc__ == "Render something."


@pytest.mark.unit
class TestDebugTimer:
    """Tests for debug_timer."""

    def test_logs_at_debug(self, caplog):
        logger = logging.getLogger("cmark_batch.tests.timer")

        with caplog.at_level(logging.DEBUG, logger="cmark_batch.tests.timer"):
            with debug_timer(logger, "Rendering (html)"):
                pass

        assert "Rendering (html) completed in" in caplog.text

    def test_silent_above_debug(self, caplog):
        logger = logging.getLogger("cmark_batch.tests.timer")

        with caplog.at_level(logging.INFO, logger="cmark_batch.tests.timer"):
            with debug_timer(logger, "Rendering (html)"):
                pass

        assert caplog.text == ""
