"""Package descriptor (pom.xml) generation.

The descriptor lets downstream Maven-style tooling consume the jar. It is
best-effort: a missing template, a bad coordinate or a render failure is
recorded as a warning and the build carries on without a descriptor.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from xml.sax.saxutils import escape as xml_escape

from ..source import BuildContext, SourceSet
from ..spi.templates import ITemplateEngine, TemplateError

POM_TEMPLATE = "pom.xml.tmpl"
DEFAULT_GROUP = "group"
DEFAULT_VERSION = "999-SNAPSHOT"


@dataclass(frozen=True)
class Coordinate:
    group: str
    artifact: str
    version: str


def parse_gav(gav: str) -> Coordinate:
    """Parse ``group:artifact[:version]``; the version defaults to 999-SNAPSHOT.

    Raises:
        ValueError: If group or artifact is missing
    """
    parts = gav.strip().split(":")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Invalid coordinate {gav!r}, expected group:artifact[:version]")
    version = parts[2] if len(parts) > 2 and parts[2] else DEFAULT_VERSION
    return Coordinate(parts[0], parts[1], version)


def _dependencies_xml(coordinates: List[str]) -> str:
    blocks = []
    for gav in coordinates:
        coord = parse_gav(gav)
        blocks.append(
            "        <dependency>\n"
            f"            <groupId>{xml_escape(coord.group)}</groupId>\n"
            f"            <artifactId>{xml_escape(coord.artifact)}</artifactId>\n"
            f"            <version>{xml_escape(coord.version)}</version>\n"
            "        </dependency>"
        )
    return "\n".join(blocks)


def generate_pom(
    ss: SourceSet,
    ctx: BuildContext,
    compile_dir: Path,
    engine: ITemplateEngine,
) -> Optional[Path]:
    """Render the pom into ``META-INF/maven/<group path>/pom.xml``.

    Returns:
        Path of the written descriptor, or None when it was skipped
    """
    template = engine.get_template(POM_TEMPLATE)
    if template is None:
        ctx.warn("descriptor", f"Could not locate {POM_TEMPLATE} template")
        return None

    base_name = ss.base_name() or "stdin"
    try:
        if ss.gav:
            coord = parse_gav(ss.gav)
        else:
            coord = Coordinate(DEFAULT_GROUP, base_name, DEFAULT_VERSION)
        dependencies = _dependencies_xml(ctx.resolve_class_path(ss).coordinates)
        text = template.render({
            "baseName": xml_escape(base_name),
            "group": xml_escape(coord.group),
            "artifact": xml_escape(coord.artifact),
            "version": xml_escape(coord.version),
            "description": xml_escape(ss.description or ""),
            "dependencies": dependencies,
        })
    except (ValueError, TemplateError) as e:
        ctx.warn("descriptor", f"Skipping pom.xml: {e}")
        return None

    pom_path = compile_dir / "META-INF" / "maven" / coord.group.replace(".", "/") / "pom.xml"
    pom_path.parent.mkdir(parents=True, exist_ok=True)
    pom_path.write_text(text, encoding="utf-8")
    return pom_path
