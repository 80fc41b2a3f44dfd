"""Unit tests for BuildContext."""

from unittest.mock import Mock

from jarforge.config import BuildSettings
from jarforge.source import Artifact, BuildContext, ResolvedClassPath


class TestBuildContext:
    def test_java_version_lookup_order(self, source_set):
        ctx = BuildContext(settings=BuildSettings(java_version="8"))
        assert ctx.get_java_version_or(source_set) == "8"

        source_set.java_version = "11+"
        assert ctx.get_java_version_or(source_set) == "11+"

        ctx.java_version = "17"
        assert ctx.get_java_version_or(source_set) == "17"

    def test_main_class_lookup_order(self, source_set):
        ctx = BuildContext()
        assert ctx.get_main_class_or(source_set) is None

        source_set.main_class = "Discovered"
        assert ctx.get_main_class_or(source_set) == "Discovered"

        ctx.main_class = "Forced"
        assert ctx.get_main_class_or(source_set) == "Forced"

    def test_class_path_resolved_once(self, source_set):
        resolver = Mock()
        resolver.resolve_class_path = Mock(return_value=ResolvedClassPath("a.jar"))
        ctx = BuildContext(resolver=resolver)

        assert ctx.resolve_class_path(source_set).class_path == "a.jar"
        assert ctx.resolve_class_path(source_set).class_path == "a.jar"
        assert resolver.resolve_class_path.call_count == 1

    def test_no_resolver_means_empty_class_path(self, source_set):
        assert BuildContext().resolve_class_path(source_set).is_empty()

    def test_warn_records_and_logs(self, caplog):
        ctx = BuildContext()
        ctx.warn("descriptor", "template missing")

        assert len(ctx.warnings) == 1
        assert ctx.warnings[0].category == "descriptor"
        assert caplog.text.count("template missing") == 1

    def test_import_jar_metadata(self, tmp_path):
        artifact = Artifact(tmp_path / "a.jar", {
            "Main-Class": "FromJar",
            "Build-Jdk": "17",
            "Jarforge-Java-Options": "-Xmx1g",
        })
        ctx = BuildContext()

        assert ctx.import_jar_metadata_for(artifact) is artifact
        assert ctx.main_class == "FromJar"
        assert ctx.build_jdk == 17
        assert ctx.runtime_options == ["-Xmx1g"]

    def test_import_keeps_explicit_main(self, tmp_path):
        artifact = Artifact(tmp_path / "a.jar", {"Main-Class": "FromJar"})
        ctx = BuildContext(main_class="Forced")

        ctx.import_jar_metadata_for(artifact)
        assert ctx.main_class == "Forced"
