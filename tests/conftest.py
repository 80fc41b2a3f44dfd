"""
Shared fixtures for jarforge tests.

Tests never run a real compiler. ``class_writer`` produces minimal but
valid .class files so main discovery and packaging have real input.
"""

import pytest

from classfiles import write_class
from jarforge.config import BuildSettings
from jarforge.config import jdk
from jarforge.source import BuildContext, SourceSet


@pytest.fixture(autouse=True)
def reset_java_detection():
    jdk.reset_detected_version()
    yield
    jdk.reset_detected_version()


@pytest.fixture
def class_writer():
    """Returns write_class(root, dotted_name, methods=None)."""
    return write_class


@pytest.fixture
def settings():
    """Settings that never look at the real machine's JDKs."""
    return BuildSettings()


@pytest.fixture
def source_file(tmp_path):
    src = tmp_path / "src" / "hello.java"
    src.parent.mkdir(parents=True)
    src.write_text("public class hello { public static void main(String[] args) {} }\n")
    return src


@pytest.fixture
def source_set(tmp_path, source_file):
    return SourceSet(
        sources=[source_file],
        jar_file=tmp_path / "out" / "hello.jar",
        main_source=source_file,
    )


@pytest.fixture
def build_context(settings):
    return BuildContext(settings=settings, java_version="17")
