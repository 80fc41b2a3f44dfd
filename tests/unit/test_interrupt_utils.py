"""Unit tests for stage interrupt handling."""

import pytest

from jarforge.build.packager import PackagingError
from jarforge.interrupt_utils import raise_stage_interrupted


def test_raises_stage_error_from_interrupt():
    ke = KeyboardInterrupt()
    with pytest.raises(PackagingError, match="Error during packaging: interrupted") as exc_info:
        raise_stage_interrupted(ke, PackagingError, "packaging")
    assert exc_info.value.__cause__ is ke


def test_partial_files_removed(tmp_path):
    partial = tmp_path / "app.jar.part"
    partial.write_bytes(b"half written")
    missing = tmp_path / "never-created.part"

    with pytest.raises(PackagingError):
        raise_stage_interrupted(KeyboardInterrupt(), PackagingError, "packaging", [partial, missing])

    assert not partial.exists()
