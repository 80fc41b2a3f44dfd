"""
Unit tests for the compile pipeline.

The compiler itself is replaced by a function that drops synthetic class
files into the output directory named after -d.
"""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from classfiles import AGENTMAIN, MAIN, PREMAIN, write_class
from jarforge.build.compile_pipeline import (
    CompileError,
    JavaCompilePipeline,
    KotlinCompilePipeline,
    pipeline_for,
)
from jarforge.config import get_property
from jarforge.config.settings import BuildSettings
from jarforge.source import ResourceFile, SourceSet
from jarforge.spi import IntegrationManager, IntegrationResult, StaticDependencyResolver


def fake_compiler(*classes):
    """Compiler stand-in writing (name, methods) class files to the -d directory."""
    def run(cmd):
        out = Path(cmd[cmd.index("-d") + 1])
        for name, methods in classes:
            write_class(out, name, methods)
    return run


@pytest.fixture
def compile_dir(source_set):
    path = source_set.jar_file.parent / (source_set.jar_file.name + ".tmp")
    path.mkdir(parents=True)
    return path


@pytest.fixture
def pipeline(source_set, build_context):
    with patch.object(JavaCompilePipeline, "get_compiler_binary", return_value="javac"):
        yield JavaCompilePipeline(source_set, build_context, show_progress=False)


class TestBuildCommand:
    def test_basic_command(self, pipeline, source_set, compile_dir):
        cmd = pipeline.build_command("17")

        assert cmd[0] == "javac"
        assert "-classpath" not in cmd
        assert cmd[cmd.index("-d") + 1] == str(compile_dir.resolve())
        assert cmd[-1] == str(source_set.sources[0])

    def test_options_and_class_path(self, source_set, settings, tmp_path):
        source_set.compile_options = ["-parameters", "-Xlint:all"]
        dep = tmp_path / "dep.jar"
        ctx = Mock()
        ctx.settings = settings
        ctx.resolve_class_path = StaticDependencyResolver([dep]).resolve_class_path

        with patch.object(JavaCompilePipeline, "get_compiler_binary", return_value="/jdk/bin/javac"):
            cmd = JavaCompilePipeline(source_set, ctx).build_command("17")

        assert cmd[:3] == ["/jdk/bin/javac", "-parameters", "-Xlint:all"]
        assert cmd[cmd.index("-classpath") + 1] == str(dep)

    def test_compile_dir_next_to_jar(self, pipeline, source_set):
        assert pipeline.compile_dir == source_set.jar_file.parent / "hello.jar.tmp"


class TestCompile:
    def test_discovers_main(self, pipeline, source_set, build_context, compile_dir):
        with patch.object(JavaCompilePipeline, "run_compiler",
                          side_effect=fake_compiler(("com.example.hello", [MAIN]))):
            result = pipeline.compile()

        assert isinstance(result, IntegrationResult)
        assert source_set.main_class == "com.example.hello"
        assert build_context.build_jdk == 17

    def test_explicit_main_not_overwritten(self, pipeline, source_set, compile_dir):
        source_set.main_class = "my.Explicit"
        with patch.object(JavaCompilePipeline, "run_compiler",
                          side_effect=fake_compiler(("com.example.hello", [MAIN]))):
            pipeline.compile()

        assert source_set.main_class == "my.Explicit"

    def test_context_main_not_overwritten(self, pipeline, source_set, build_context, compile_dir):
        build_context.main_class = "my.Forced"
        with patch.object(JavaCompilePipeline, "run_compiler",
                          side_effect=fake_compiler(("com.example.hello", [MAIN]))):
            pipeline.compile()

        assert source_set.main_class is None
        assert build_context.get_main_class_or(source_set) == "my.Forced"

    def test_ambiguous_main_warns(self, pipeline, source_set, build_context, compile_dir):
        with patch.object(JavaCompilePipeline, "run_compiler",
                          side_effect=fake_compiler(("a.One", [MAIN]), ("b.Two", [MAIN]))):
            pipeline.compile()

        assert source_set.main_class == "a.One"
        assert [w.category for w in build_context.warnings] == ["main"]
        assert "a.One,b.Two" in build_context.warnings[0].message

    def test_suggested_main_from_file_name(self, pipeline, source_set, build_context, compile_dir):
        with patch.object(JavaCompilePipeline, "run_compiler",
                          side_effect=fake_compiler(("a.Other", [MAIN]), ("b.hello", [MAIN]))):
            pipeline.compile()

        assert source_set.main_class == "b.hello"
        assert build_context.warnings == []

    def test_agent_classes(self, pipeline, source_set, compile_dir):
        source_set.agent = True
        with patch.object(JavaCompilePipeline, "run_compiler",
                          side_effect=fake_compiler(("a.Agent", [AGENTMAIN, PREMAIN]), ("a.hello", [MAIN]))):
            pipeline.compile()

        assert source_set.agent_main_class == "a.Agent"
        assert source_set.premain_class == "a.Agent"
        assert source_set.main_class == "a.hello"

    def test_copies_resources_and_writes_pom(self, pipeline, source_set, compile_dir, tmp_path):
        resource = tmp_path / "app.properties"
        resource.write_text("greeting=hi\n")
        source_set.resources.append(ResourceFile(resource, "config/app.properties"))

        with patch.object(JavaCompilePipeline, "run_compiler", side_effect=fake_compiler()):
            pipeline.compile()

        assert (compile_dir / "config" / "app.properties").read_text() == "greeting=hi\n"
        assert (compile_dir / "META-INF" / "maven" / "group" / "pom.xml").exists()

    def test_missing_resource_fails(self, pipeline, source_set, compile_dir, tmp_path):
        source_set.resources.append(ResourceFile(tmp_path / "missing.txt", "missing.txt"))

        with patch.object(JavaCompilePipeline, "run_compiler") as run_compiler:
            with pytest.raises(CompileError, match="resources"):
                pipeline.compile()
        run_compiler.assert_not_called()

    def test_compiler_failure_propagates(self, pipeline, compile_dir):
        with patch.object(JavaCompilePipeline, "run_compiler",
                          side_effect=CompileError("Error during compile (exit code 1)")):
            with pytest.raises(CompileError, match="exit code 1"):
                pipeline.compile()

    def test_malformed_class_file(self, pipeline, compile_dir):
        def broken(cmd):
            (compile_dir / "Broken.class").write_bytes(b"garbage")

        with patch.object(JavaCompilePipeline, "run_compiler", side_effect=broken):
            with pytest.raises(CompileError, match="index"):
                pipeline.compile()


class TestIntegrations:
    def _pipeline(self, source_set, build_context, hooks):
        with patch.object(JavaCompilePipeline, "get_compiler_binary", return_value="javac"):
            return JavaCompilePipeline(
                source_set, build_context,
                integrations=IntegrationManager(hooks),
                show_progress=False,
            )

    def test_integration_main_and_args(self, source_set, build_context, compile_dir):
        seen = {}

        def hook(request):
            seen["dir"] = request.compile_dir
            seen["pom"] = request.descriptor_path
            return IntegrationResult(main_class="io.quarkus.Main", java_args=["-Dquarkus=1"])

        pipeline = self._pipeline(source_set, build_context, [hook])
        with patch.object(JavaCompilePipeline, "run_compiler",
                          side_effect=fake_compiler(("com.example.hello", [MAIN]))):
            pipeline.compile()

        assert build_context.main_class == "io.quarkus.Main"
        assert source_set.main_class is None
        assert source_set.runtime_options == ["-Dquarkus=1"]
        assert seen["dir"] == compile_dir
        assert seen["pom"].name == "pom.xml"

    def test_properties_visible_during_hook_only(self, source_set, build_context, compile_dir):
        build_context.properties = {"hook.flag": "on"}
        seen = {}

        def hook(request):
            seen["explicit"] = request.properties.get("hook.flag")
            seen["ambient"] = get_property("hook.flag")
            return None

        pipeline = self._pipeline(source_set, build_context, [hook])
        with patch.object(JavaCompilePipeline, "run_compiler", side_effect=fake_compiler()):
            pipeline.compile()

        assert seen == {"explicit": "on", "ambient": "on"}
        assert get_property("hook.flag") is None

    def test_failing_hook_restores_properties(self, source_set, build_context, compile_dir):
        build_context.properties = {"hook.flag": "on"}

        def hook(request):
            raise RuntimeError("integration exploded")

        pipeline = self._pipeline(source_set, build_context, [hook])
        with patch.object(JavaCompilePipeline, "run_compiler", side_effect=fake_compiler()):
            with pytest.raises(CompileError, match="integration exploded"):
                pipeline.compile()

        assert get_property("hook.flag") is None


class TestPipelineSelection:
    def test_java_default(self, source_set, build_context):
        assert isinstance(pipeline_for(source_set, build_context), JavaCompilePipeline)

    def test_kotlin(self, tmp_path, build_context):
        src = tmp_path / "hello.kt"
        ss = SourceSet(sources=[src], jar_file=tmp_path / "hello.jar", main_source=src)
        assert isinstance(pipeline_for(ss, build_context), KotlinCompilePipeline)

    def test_kotlin_compiler_from_home(self, tmp_path):
        home = tmp_path / "kotlin"
        (home / "bin").mkdir(parents=True)
        (home / "bin" / "kotlinc").write_text("#!/bin/sh\n")
        ctx = Mock()
        ctx.settings = BuildSettings(kotlin_home=home)
        ss = SourceSet(sources=[], jar_file=tmp_path / "a.jar")

        with patch("jarforge.config.jdk.platform.system", return_value="Linux"):
            binary = KotlinCompilePipeline(ss, ctx).get_compiler_binary(None)
        assert binary == str(home / "bin" / "kotlinc")
