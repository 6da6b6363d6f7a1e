from pathlib import Path
from typing import Optional, Union

from ornithe_launcher.core.constants import DEFAULT_SERVER_JAR, SERVER_JAR_KEY, SERVER_PROPERTIES_FILES
from ornithe_launcher.core.settings import settings
from ornithe_launcher.core.utils.logging import get_logger
from ornithe_launcher.core.utils.properties import parse_properties

logger = get_logger("ornithe.server_config")


def find_properties_file(workdir: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """First launcher properties file present in ``workdir``."""
    root = Path(workdir) if workdir is not None else settings.working_dir
    for name in SERVER_PROPERTIES_FILES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def resolve_server_jar(workdir: Optional[Union[str, Path]] = None) -> str:
    """Path of the server jar, ``server.jar`` unless a properties file says otherwise.

    Most hosting platforms don't allow passing arbitrary arguments to the
    server, so the file name is configured through a properties file instead.
    """
    path = find_properties_file(workdir)
    if path is None:
        return DEFAULT_SERVER_JAR
    try:
        props = parse_properties(path.read_text(encoding="utf-8", errors="replace"))
    except OSError as e:
        logger.warning("server_properties_unreadable", path=str(path), error=str(e))
        return DEFAULT_SERVER_JAR
    value = props.get(SERVER_JAR_KEY)
    if not value:
        return DEFAULT_SERVER_JAR
    logger.debug("server_jar_configured", path=str(path), server_jar=value)
    return value
