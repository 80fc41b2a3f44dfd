"""Shell-safe argument escaping.

The same runtime options are both echoed as runnable commands for the
user's shell and persisted inside jar manifests, where a later invocation
reads them back. Those two uses need different quoting, so every dialect
gets its own pure function and ``escape`` dispatches on the dialect tag.

Dialects:
    POSIX       - sh/bash: single quotes, ' becomes '\\''
    CMD         - Windows cmd.exe: caret escapes inside ^"...^"
    POWERSHELL  - single quotes, ' doubled
    PORTABLE    - double quotes with backslash escapes; used for manifests.
                  Line breaks become \\n and \\r so the result stays on
                  one manifest line
"""

import re
from enum import Enum
from typing import Iterable, List

from .config.settings import Shell

# Not a definitive list, but every character here is inert in its shell.
_CMD_SAFE = re.compile(r"[a-zA-Z0-9.,_+=:;@()-]*")
_POWERSHELL_SAFE = re.compile(r"[a-zA-Z0-9.,_+=:;@()-]*")
_POSIX_SAFE = re.compile(r"[a-zA-Z0-9._+=:@%/-]*")

_CMD_META = re.compile(r"([()!^<>&|% ])")

_PORTABLE_ESCAPES = {'"': '\\"', "'": "\\'", "\\": "\\\\", "\n": "\\n", "\r": "\\r"}
_PORTABLE_UNESCAPES = {"n": "\n", "r": "\r"}


class Dialect(Enum):
    """Target quoting dialect."""

    POSIX = "posix"
    CMD = "cmd"
    POWERSHELL = "powershell"
    PORTABLE = "portable"

    @classmethod
    def for_shell(cls, shell: Shell) -> "Dialect":
        return {
            Shell.BASH: cls.POSIX,
            Shell.CMD: cls.CMD,
            Shell.POWERSHELL: cls.POWERSHELL,
        }[shell]


def escape_posix(arg: str) -> str:
    if _POSIX_SAFE.fullmatch(arg):
        return arg
    return "'" + arg.replace("'", "'\\''") + "'"


def escape_cmd(arg: str) -> str:
    if _CMD_SAFE.fullmatch(arg):
        return arg
    arg = _CMD_META.sub(r"^\1", arg)
    arg = arg.replace('"', '\\^"')
    return '^"' + arg + '^"'


def escape_powershell(arg: str) -> str:
    if _POWERSHELL_SAFE.fullmatch(arg):
        return arg
    return "'" + arg.replace("'", "''") + "'"


def escape_portable(arg: str) -> str:
    if _POSIX_SAFE.fullmatch(arg):
        return arg
    return '"' + re.sub(r"[\"'\\\n\r]", lambda m: _PORTABLE_ESCAPES[m.group(0)], arg) + '"'


_ESCAPERS = {
    Dialect.POSIX: escape_posix,
    Dialect.CMD: escape_cmd,
    Dialect.POWERSHELL: escape_powershell,
    Dialect.PORTABLE: escape_portable,
}


def escape(arg: str, dialect: Dialect) -> str:
    """Escape a single argument for the given dialect.

    Arguments made only of the dialect's safe characters come back unchanged.
    """
    return _ESCAPERS[dialect](arg)


def escape_os_arguments(args: Iterable[str], shell: Shell) -> List[str]:
    """Escape arguments for the shell the user is running."""
    dialect = Dialect.for_shell(shell)
    return [escape(arg, dialect) for arg in args]


def escape_arguments(args: Iterable[str]) -> List[str]:
    """Escape arguments with the portable form used in persisted metadata."""
    return [escape_portable(arg) for arg in args]


def split_persisted(text: str) -> List[str]:
    """Split a space-joined string of portable-escaped arguments.

    Inverse of ``" ".join(escape_arguments(args))``. Inside double quotes
    ``\\n`` and ``\\r`` are line breaks and a backslash escapes any other
    next character; outside, whitespace separates arguments.

    Raises:
        ValueError: If a double quote is left unterminated
    """
    args: List[str] = []
    current: List[str] = []
    in_token = False
    quoted = False
    i = 0
    while i < len(text):
        ch = text[i]
        if quoted:
            if ch == "\\" and i + 1 < len(text):
                i += 1
                current.append(_PORTABLE_UNESCAPES.get(text[i], text[i]))
            elif ch == '"':
                quoted = False
            else:
                current.append(ch)
        elif ch == '"':
            quoted = True
            in_token = True
        elif ch.isspace():
            if in_token:
                args.append("".join(current))
                current = []
                in_token = False
        else:
            current.append(ch)
            in_token = True
        i += 1

    if quoted:
        raise ValueError(f"Unterminated quote in persisted arguments: {text!r}")
    if in_token:
        args.append("".join(current))
    return args
