import subprocess
from typing import Callable, Optional

from ornithe_launcher.core.errors import SpawnError
from ornithe_launcher.core.models import FinalCommand
from ornithe_launcher.core.utils.logging import get_logger

logger = get_logger("ornithe.process")


def launch(
    command: FinalCommand,
    *,
    popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    cwd: Optional[str] = None,
) -> int:
    """Run ``command`` with inherited stdio and block until it exits.

    Returns the child's exit status, ``128 + signum`` when a signal killed
    it. There is no timeout.
    """
    argv = list(command.argv)
    logger.debug("spawning", argv=argv)
    try:
        proc = popen(argv, cwd=cwd)
    except FileNotFoundError as e:
        raise SpawnError("ERR_SPAWN_NOT_FOUND", f"Executable not found: {argv[0]}") from e
    except PermissionError as e:
        raise SpawnError("ERR_SPAWN_DENIED", f"Permission denied starting {argv[0]}") from e
    except OSError as e:
        raise SpawnError("ERR_SPAWN", f"Failed to start {argv[0]}: {e}") from e

    logger.info("server_started", pid=proc.pid)
    while True:
        try:
            rc = proc.wait()
            break
        except KeyboardInterrupt:
            # Ctrl+C reaches the whole foreground group; let the server shut down on its own.
            logger.info("interrupt_received_waiting_for_server", pid=proc.pid)
    logger.info("server_exited", pid=proc.pid, returncode=rc)
    if rc < 0:
        # Killed by a signal: report it the way shells do.
        return 128 - rc
    return rc
