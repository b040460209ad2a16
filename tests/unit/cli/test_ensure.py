"""Tests for CLI Ensure utility class."""

from pathlib import Path

import pytest

from forkswap.cli.ensure import Ensure
from forkswap.core.config import ForkSwapConfig
from tests.fakes.context import create_test_context
from tests.fakes.system import FakeSystem


class TestEnsureInvariant:
    """Tests for Ensure.invariant method."""

    def test_passes_when_true(self) -> None:
        """Ensure.invariant does nothing when the condition holds."""
        Ensure.invariant(True, "never shown")

    def test_exits_with_styled_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Ensure.invariant prints a red Error prefix to stderr and exits 1."""
        with pytest.raises(SystemExit) as exc_info:
            Ensure.invariant(False, "The fork frogpilot does not exist.")

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "Error:" in captured.err
        assert "The fork frogpilot does not exist." in captured.err


class TestEnsureNotNone:
    """Tests for Ensure.not_none method."""

    def test_returns_value_when_not_none(self) -> None:
        """Ensure.not_none returns the value unchanged when not None."""
        assert Ensure.not_none("stock", "No active fork") == "stock"

    def test_empty_string_is_not_none(self) -> None:
        """Ensure.not_none returns empty string since empty string is not None."""
        assert Ensure.not_none("", "Value is None") == ""

    def test_exits_when_none(self) -> None:
        """Ensure.not_none raises SystemExit when value is None."""
        with pytest.raises(SystemExit) as exc_info:
            Ensure.not_none(None, "No active fork")
        assert exc_info.value.code == 1


class TestEnsureRunningAsRoot:
    """Tests for Ensure.running_as_root method."""

    def test_passes_for_root(self, tmp_path: Path) -> None:
        ctx = create_test_context(ForkSwapConfig.for_data_root(tmp_path))
        Ensure.running_as_root(ctx)

    def test_exits_for_unprivileged_user(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ctx = create_test_context(
            ForkSwapConfig.for_data_root(tmp_path), system=FakeSystem(is_root=False)
        )

        with pytest.raises(SystemExit) as exc_info:
            Ensure.running_as_root(ctx)

        assert exc_info.value.code == 1
        assert "This script must be run as root" in capsys.readouterr().err
