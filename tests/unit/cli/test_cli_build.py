"""Tests for the CLI build command."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from jarforge.build import BuildResult
from jarforge.cli import BuildArgs, create_build, default_jar_path, main
from jarforge.config import BuildSettings
from jarforge.source import Artifact


class TestCLIBuild:
    """Tests for the 'jarforge build' command."""

    @pytest.fixture(autouse=True)
    def clean_environment(self, monkeypatch, tmp_path):
        for name in ("JARFORGE_FRESH", "JARFORGE_VERBOSE", "JARFORGE_JAVA"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("JARFORGE_CONFIG", str(tmp_path / "missing.ini"))

    @pytest.fixture
    def mock_orchestrator(self):
        with patch("jarforge.cli.BuildOrchestrator") as mock_orch_class, \
                patch("jarforge.cli.setup_logging") as mock_setup_logging:
            mock_instance = MagicMock()
            mock_orch_class.return_value = mock_instance
            mock_instance.class_ = mock_orch_class
            mock_instance.setup_logging = mock_setup_logging
            yield mock_instance

    @pytest.fixture
    def success_result(self, source_file):
        return BuildResult(
            success=True,
            artifact=Artifact(source_file.with_suffix(".jar"), {"Main-Class": "hello"}),
            rebuilt=True,
            native_image_path=None,
            build_time=1.5,
            message="Build successful",
        )

    @pytest.fixture
    def failure_result(self):
        return BuildResult(
            success=False,
            artifact=None,
            rebuilt=True,
            native_image_path=None,
            build_time=0.5,
            message="Error during compile (exit code 1)",
            exit_code=1,
        )

    def test_build_success(self, mock_orchestrator, success_result, source_file, capsys):
        mock_orchestrator.run.return_value = success_result

        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(source_file)])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "Build successful" in captured.out
        assert "hello.jar" in captured.out
        assert "Main-Class: hello" in captured.out

        ss, ctx = mock_orchestrator.class_.call_args.args
        assert ss.jar_file == source_file.resolve().with_suffix(".jar")
        assert ss.main_source == source_file.resolve()
        assert ctx.native_image is False
        assert mock_orchestrator.class_.call_args.kwargs["fresh"] is False

    def test_up_to_date(self, mock_orchestrator, success_result, source_file, capsys):
        success_result.rebuilt = False
        mock_orchestrator.run.return_value = success_result

        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(source_file)])

        assert exc_info.value.code == 0
        assert "Up to date" in capsys.readouterr().out

    def test_build_failure(self, mock_orchestrator, failure_result, source_file, capsys):
        mock_orchestrator.run.return_value = failure_result

        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(source_file)])

        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "Build failed!" in captured.out
        assert "exit code 1" in captured.out

    def test_warnings_not_repeated_in_summary(self, mock_orchestrator, success_result, source_file, capsys):
        from jarforge.errors import ConfigurationWarning

        success_result.warnings = [ConfigurationWarning("main", "Could not locate unique main() method")]
        mock_orchestrator.run.return_value = success_result

        with pytest.raises(SystemExit):
            main(["build", str(source_file)])

        # Warnings reach the console once, when the build logs them
        assert "Could not locate unique main() method" not in capsys.readouterr().out

    def test_build_options(self, mock_orchestrator, success_result, source_file, tmp_path):
        mock_orchestrator.run.return_value = success_result
        dep = tmp_path / "dep.jar"

        with pytest.raises(SystemExit) as exc_info:
            main([
                "build", str(source_file),
                "-o", str(tmp_path / "custom.jar"),
                "--java", "17+",
                "-m", "my.Main",
                "--native",
                "--fresh",
                "-D", "quarkus.profile=prod",
                "-D", "flag",
                "-R=-Xmx1g",
                "--runtime-option=-Dmode=fast",
                "-C=-parameters",
                "--cp", str(dep),
            ])

        assert exc_info.value.code == 0
        ss, ctx = mock_orchestrator.class_.call_args.args
        assert ss.jar_file == tmp_path / "custom.jar"
        assert ss.runtime_options == ["-Xmx1g", "-Dmode=fast"]
        assert ss.compile_options == ["-parameters"]
        assert ctx.java_version == "17+"
        assert ctx.main_class == "my.Main"
        assert ctx.native_image is True
        assert ctx.properties == {"quarkus.profile": "prod", "flag": "true"}
        assert ctx.resolve_class_path(ss).artifacts == [dep]
        assert mock_orchestrator.class_.call_args.kwargs["fresh"] is True

    def test_verbose_logging(self, mock_orchestrator, success_result, source_file):
        mock_orchestrator.run.return_value = success_result

        with pytest.raises(SystemExit):
            main(["build", "-v", str(source_file)])

        assert mock_orchestrator.setup_logging.call_args.kwargs["verbose"] is True

    def test_missing_source(self, mock_orchestrator, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(tmp_path / "missing.java")])

        assert exc_info.value.code == 2
        assert "does not exist" in capsys.readouterr().out
        mock_orchestrator.class_.assert_not_called()

    def test_bad_property(self, mock_orchestrator, source_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["build", str(source_file), "-D", "=oops"])

        assert exc_info.value.code == 1
        assert "Invalid property" in capsys.readouterr().out

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        assert "usage" in capsys.readouterr().out.lower()


class TestCreateBuild:
    def test_default_jar_path(self):
        assert default_jar_path(Path("/src/hello.java")) == Path("/src/hello.jar")

    def test_settings_native_and_fresh(self, source_file):
        settings = BuildSettings(native=True, fresh=True)
        orchestrator = create_build(BuildArgs(sources=[source_file]), settings)

        assert orchestrator.ctx.native_image is True
        assert orchestrator.fresh is True
        assert orchestrator.ss.jar_file == source_file.with_suffix(".jar")
