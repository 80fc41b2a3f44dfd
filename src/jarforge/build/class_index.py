"""Minimal class file indexer.

Reads just enough of a .class file to answer "which classes declare a
method with this name and these parameter types". Constant pool entries
other than Utf8 and Class are skipped; attributes are skipped entirely.

Class file layout (JVMS chapter 4):
    magic u4, minor u2, major u2, constant_pool_count u2, constant_pool[],
    access_flags u2, this_class u2, super_class u2,
    interfaces_count u2, interfaces[], fields_count u2, fields[],
    methods_count u2, methods[], attributes_count u2, attributes[]
"""

import struct
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

CLASS_MAGIC = 0xCAFEBABE

STRING_TYPE = "Ljava/lang/String;"
STRING_ARRAY_TYPE = "[Ljava/lang/String;"
INSTRUMENTATION_TYPE = "Ljava/lang/instrument/Instrumentation;"

_TAG_UTF8 = 1
_TAG_CLASS = 7
_TAG_LONG = 5
_TAG_DOUBLE = 6

# Payload sizes of the fixed-size constant pool entries, by tag
_FIXED_SIZES = {
    3: 4,   # Integer
    4: 4,   # Float
    5: 8,   # Long
    6: 8,   # Double
    7: 2,   # Class
    8: 2,   # String
    9: 4,   # Fieldref
    10: 4,  # Methodref
    11: 4,  # InterfaceMethodref
    12: 4,  # NameAndType
    15: 3,  # MethodHandle
    16: 2,  # MethodType
    17: 4,  # Dynamic
    18: 4,  # InvokeDynamic
    19: 2,  # Module
    20: 2,  # Package
}


class ClassFormatError(ValueError):
    """Raised when bytes are not a readable class file."""
    pass


def parse_parameter_types(descriptor: str) -> Tuple[str, ...]:
    """Split a method descriptor into its parameter type descriptors.

    Example:
        "([Ljava/lang/String;I)V" -> ("[Ljava/lang/String;", "I")
    """
    if not descriptor.startswith("("):
        raise ClassFormatError(f"Not a method descriptor: {descriptor!r}")
    params: List[str] = []
    i = 1
    while i < len(descriptor) and descriptor[i] != ")":
        start = i
        while i < len(descriptor) and descriptor[i] == "[":
            i += 1
        if i >= len(descriptor):
            break
        if descriptor[i] == "L":
            end = descriptor.find(";", i)
            if end < 0:
                raise ClassFormatError(f"Unterminated type in {descriptor!r}")
            i = end + 1
        else:
            i += 1
        params.append(descriptor[start:i])
    if i >= len(descriptor):
        raise ClassFormatError(f"Unterminated parameter list in {descriptor!r}")
    return tuple(params)


@dataclass(frozen=True)
class MethodInfo:
    name: str
    descriptor: str
    access_flags: int

    @property
    def parameter_types(self) -> Tuple[str, ...]:
        return parse_parameter_types(self.descriptor)


@dataclass
class ClassInfo:
    """A class as seen by the indexer. ``name`` is dotted (a.b.Main)."""

    name: str
    access_flags: int
    methods: List[MethodInfo] = field(default_factory=list)

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def method(self, name: str, *parameter_types: str) -> Optional[MethodInfo]:
        """Find a declared method by name and exact parameter types."""
        for method in self.methods:
            if method.name == name and method.parameter_types == parameter_types:
                return method
        return None


class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self.data):
            raise ClassFormatError("Truncated class file")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def u1(self) -> int:
        return self.take(1)[0]

    def u2(self) -> int:
        return struct.unpack(">H", self.take(2))[0]

    def u4(self) -> int:
        return struct.unpack(">I", self.take(4))[0]


def read_class(data: bytes) -> ClassInfo:
    """Parse one class file.

    Raises:
        ClassFormatError: If the data is not a valid class file
    """
    reader = _Reader(data)
    if reader.u4() != CLASS_MAGIC:
        raise ClassFormatError("Bad magic number")
    reader.u2()  # minor
    reader.u2()  # major

    count = reader.u2()
    utf8: Dict[int, str] = {}
    classes: Dict[int, int] = {}
    index = 1
    while index < count:
        tag = reader.u1()
        if tag == _TAG_UTF8:
            length = reader.u2()
            utf8[index] = reader.take(length).decode("utf-8", errors="replace")
        elif tag == _TAG_CLASS:
            classes[index] = reader.u2()
        elif tag in _FIXED_SIZES:
            reader.take(_FIXED_SIZES[tag])
        else:
            raise ClassFormatError(f"Unknown constant pool tag {tag} at index {index}")
        # Long and Double take two slots
        index += 2 if tag in (_TAG_LONG, _TAG_DOUBLE) else 1

    def utf8_at(i: int) -> str:
        try:
            return utf8[i]
        except KeyError:
            raise ClassFormatError(f"Constant {i} is not a Utf8 entry") from None

    access_flags = reader.u2()
    this_class = reader.u2()
    if this_class not in classes:
        raise ClassFormatError("this_class does not reference a Class entry")
    name = utf8_at(classes[this_class]).replace("/", ".")
    reader.u2()  # super_class
    reader.take(2 * reader.u2())  # interfaces

    def skip_attributes() -> None:
        for _ in range(reader.u2()):
            reader.u2()
            reader.take(reader.u4())

    for _ in range(reader.u2()):  # fields
        reader.take(6)
        skip_attributes()

    info = ClassInfo(name=name, access_flags=access_flags)
    for _ in range(reader.u2()):
        flags = reader.u2()
        method_name = utf8_at(reader.u2())
        descriptor = utf8_at(reader.u2())
        skip_attributes()
        info.methods.append(MethodInfo(method_name, descriptor, flags))

    return info


class ClassIndex:
    """Completed index. Classes keep the order they were indexed in."""

    def __init__(self, classes: List[ClassInfo]):
        self._classes = list(classes)
        self._by_name = {c.name: c for c in self._classes}

    @property
    def known_classes(self) -> List[ClassInfo]:
        return list(self._classes)

    def get_class_by_name(self, name: str) -> Optional[ClassInfo]:
        return self._by_name.get(name)


class ClassIndexer:
    """Accumulates classes, then produces a ClassIndex."""

    def __init__(self):
        self._classes: List[ClassInfo] = []

    def index(self, data: bytes) -> ClassInfo:
        info = read_class(data)
        self._classes.append(info)
        return info

    def complete(self) -> ClassIndex:
        return ClassIndex(self._classes)
