"""External tool execution.

Compilers and native-image run as child processes that inherit our
standard streams. There is no timeout; the build waits as long as the
tool runs. A KeyboardInterrupt during the wait stops the whole tool
process tree (compilers fork helpers) and surfaces as a build failure of
the calling stage.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Type

import psutil

from ..errors import BuildError
from ..interrupt_utils import raise_stage_interrupted


def kill_process_tree(pid: int, timeout: float = 3) -> int:
    """Terminate a process and all of its descendants.

    Children are terminated before parents. Processes still alive after
    ``timeout`` seconds are killed.

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
        processes = root.children(recursive=True)
        processes.reverse()
        processes.append(root)
    except psutil.NoSuchProcess:
        return 0

    signalled: List[psutil.Process] = []
    for proc in processes:
        try:
            proc.terminate()
            signalled.append(proc)
        except psutil.NoSuchProcess:
            pass  # Already gone

    _gone, alive = psutil.wait_procs(signalled, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass

    return len(signalled)


def run_tool(
    cmd: List[str],
    error_cls: Type[BuildError],
    action: str,
    stdout_path: Optional[Path] = None,
) -> None:
    """Run an external tool and wait for it.

    Args:
        cmd: Command line, program first
        error_cls: Stage error raised on failure
        action: Short description used in error messages ("compile")
        stdout_path: Redirect the tool's standard output to this file

    Raises:
        error_cls: If the tool cannot be started, exits non-zero, or the
            wait is interrupted
    """
    stdout_file = None
    try:
        if stdout_path is not None:
            stdout_file = open(stdout_path, "wb")
        try:
            process = subprocess.Popen(cmd, stdout=stdout_file)
        except OSError as e:
            raise error_cls(f"Error during {action}: cannot run {cmd[0]}: {e}") from e

        try:
            returncode = process.wait()
        except KeyboardInterrupt as ke:
            killed = kill_process_tree(process.pid)
            logging.debug(f"Stopped {killed} processes after interrupt")
            raise_stage_interrupted(ke, error_cls, action)
    finally:
        if stdout_file is not None:
            stdout_file.close()

    if returncode != 0:
        raise error_cls(f"Error during {action} (exit code {returncode})")
