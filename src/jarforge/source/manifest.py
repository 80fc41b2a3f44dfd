"""Reading and writing of the jar manifest format (META-INF/MANIFEST.MF).

Only the main section is handled. Lines are limited to 72 bytes; longer
values continue on following lines that start with a single space.
"""

import re
from typing import Dict, List, Mapping

MANIFEST_PATH = "META-INF/MANIFEST.MF"
MAX_LINE_BYTES = 72

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ManifestError(ValueError):
    """Raised when manifest text cannot be parsed."""
    pass


def parse_manifest(data: bytes) -> Dict[str, str]:
    """Parse the main section of a manifest.

    Args:
        data: Raw manifest bytes

    Returns:
        Attribute name to value, in file order

    Raises:
        ManifestError: If a line is neither an attribute nor a continuation
    """
    text = data.decode("utf-8")
    attributes: Dict[str, str] = {}
    last_key = None

    for line in _LINE_BREAK.split(text):
        if not line:
            # End of main section
            break
        if line.startswith(" "):
            if last_key is None:
                raise ManifestError("Continuation line before any attribute")
            attributes[last_key] += line[1:]
            continue
        key, sep, value = line.partition(": ")
        if not sep:
            raise ManifestError(f"Malformed manifest line: {line!r}")
        attributes[key] = value
        last_key = key

    return attributes


def _wrap(line: str) -> List[str]:
    chunks: List[str] = []
    current = ""
    current_bytes = 0
    limit = MAX_LINE_BYTES
    for ch in line:
        size = len(ch.encode("utf-8"))
        if current_bytes + size > limit:
            chunks.append(current)
            current = " "
            current_bytes = 1
        current += ch
        current_bytes += size
    chunks.append(current)
    return chunks


def format_manifest(attributes: Mapping[str, str]) -> bytes:
    """Serialize attributes as a manifest main section.

    Manifest-Version is always written first.

    Raises:
        ManifestError: If a name or value contains a line break
    """
    for key, value in attributes.items():
        if _LINE_BREAK.search(key) or _LINE_BREAK.search(value):
            raise ManifestError(f"Line break in manifest attribute {key!r}")

    lines: List[str] = []
    ordered = dict(attributes)
    version = ordered.pop("Manifest-Version", "1.0")
    lines.extend(_wrap(f"Manifest-Version: {version}"))
    for key, value in ordered.items():
        lines.extend(_wrap(f"{key}: {value}"))
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")
