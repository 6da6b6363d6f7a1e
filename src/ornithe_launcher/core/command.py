"""Reconstruction of the child JVM command line."""
import os
from pathlib import Path
from typing import List, Optional, Union

from ornithe_launcher.core import archive
from ornithe_launcher.core.constants import GAME_JAR_PROPERTIES, JAVAAGENT_FLAG, LAUNCHER_CLASS
from ornithe_launcher.core.errors import ArchiveReadError, LibraryReadError
from ornithe_launcher.core.models import FinalCommand, LaunchDescriptor, RawInvocation
from ornithe_launcher.core.server_config import resolve_server_jar
from ornithe_launcher.core.settings import settings
from ornithe_launcher.core.transform_cache import ensure_transformed
from ornithe_launcher.core.utils.logging import get_logger

logger = get_logger("ornithe.command")

PathLike = Union[str, Path]


def _norm(entry: str) -> str:
    return Path(entry.replace("\\", "/")).as_posix()


def strip_invocation_args(invocation: RawInvocation) -> List[str]:
    """Process argv without the executable and without any launch argument."""
    drop = set(invocation.launch_args)
    return [tok for tok in invocation.process_argv[1:] if tok not in drop]


def rewrite_jar_argument(tokens: List[str], agent_path: str, base_dir: Path) -> List[str]:
    """Turn ``-jar <path>`` into ``-cp <manifest classpath + path>`` in place.

    Returns the classpath that was put on the command line, or an empty list
    when nothing was rewritten.
    """
    try:
        idx = tokens.index("-jar")
    except ValueError:
        return []
    if idx + 1 >= len(tokens):
        logger.warning("jar_argument_missing_path")
        return []

    jar = tokens[idx + 1]
    jar_path = Path(jar) if Path(jar).is_absolute() else base_dir / jar
    try:
        entries = archive.read_classpath(jar_path)
    except ArchiveReadError as e:
        logger.error("launch_jar_manifest_unreadable", jar=str(jar_path), error=e.message)
        return []
    if not entries:
        logger.info("launch_jar_without_classpath", jar=jar)
        return []

    agent = _norm(agent_path)
    classpath = [e for e in entries if _norm(e) != agent]
    classpath.append(jar)
    tokens[idx] = "-cp"
    tokens[idx + 1] = os.pathsep.join(classpath)
    logger.info("classpath_rewritten", jar=jar, entries=len(classpath))
    return classpath


def apply_main_class(tokens: List[str], main_class: str, launcher_class: str) -> None:
    try:
        tokens[tokens.index(launcher_class)] = main_class
    except ValueError:
        tokens.append(main_class)


def build_command(
    invocation: RawInvocation,
    descriptor: Optional[LaunchDescriptor],
    *,
    server_jar: Optional[str] = None,
    cache_root: Optional[PathLike] = None,
    workdir: Optional[PathLike] = None,
    launcher_class: str = LAUNCHER_CLASS,
) -> FinalCommand:
    """Assemble the child command.

    Without a descriptor the invocation is passed through unchanged apart from
    the launch arguments moving to the end. An unreadable library skips the
    transform and the game-jar properties; other transform failures propagate.
    """
    base = Path(workdir) if workdir is not None else settings.working_dir
    executable = invocation.executable
    tokens = strip_invocation_args(invocation)
    launch_args = list(invocation.launch_args)

    if descriptor is None:
        return FinalCommand(argv=tuple([executable, *tokens, *launch_args]))

    classpath = rewrite_jar_argument(tokens, descriptor.agent_path, base)

    server = server_jar or resolve_server_jar(base)
    root = Path(cache_root) if cache_root is not None else base / settings.CACHE_DIR
    try:
        transformed = ensure_transformed(server, classpath, root, base_dir=base)
    except LibraryReadError as e:
        # The JVM ignores missing Class-Path entries; start on the untouched server jar.
        logger.error("server_jar_transform_skipped", server_jar=server, error=e.message)
        transformed = None

    injected = [JAVAAGENT_FLAG + descriptor.agent_path, *descriptor.jvm_args]
    if transformed is not None:
        injected.extend(f"-D{prop}={transformed}" for prop in GAME_JAR_PROPERTIES)

    apply_main_class(tokens, descriptor.main_class, launcher_class)

    argv = (executable, *injected, *tokens, *launch_args)
    return FinalCommand(argv=argv, transformed_archive=str(transformed) if transformed is not None else None)
