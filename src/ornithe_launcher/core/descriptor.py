"""Loading of the ``ornithe-args.json`` launch descriptor written by the installer."""
from pathlib import Path
from typing import Optional, Union

import orjson
from pydantic import ValidationError

from ornithe_launcher.core import archive
from ornithe_launcher.core.constants import DESCRIPTOR_FILE_NAME
from ornithe_launcher.core.errors import ArchiveReadError, DescriptorError
from ornithe_launcher.core.models import LaunchDescriptor, RawInvocation
from ornithe_launcher.core.settings import settings
from ornithe_launcher.core.utils.logging import get_logger

logger = get_logger("ornithe.descriptor")

PathLike = Union[str, Path]


def parse_descriptor(raw: bytes, source: str) -> LaunchDescriptor:
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise DescriptorError("ERR_DESCRIPTOR_JSON", f"Malformed launch descriptor {source}: {e}") from e
    if not isinstance(data, dict):
        raise DescriptorError("ERR_DESCRIPTOR_SHAPE", f"Launch descriptor {source} must be a JSON object")
    try:
        return LaunchDescriptor.model_validate(data)
    except ValidationError as e:
        raise DescriptorError(
            "ERR_DESCRIPTOR_FIELDS",
            f"Invalid launch descriptor {source}: {e.error_count()} error(s)\n{e}",
            hint="Re-run the installer to regenerate the launch jar.",
        ) from e


def load_descriptor(path: PathLike) -> Optional[LaunchDescriptor]:
    """Descriptor from a loose JSON file. None when the file doesn't exist."""
    p = Path(path)
    try:
        raw = p.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise DescriptorError("ERR_DESCRIPTOR_IO", f"Failed to read launch descriptor {p}: {e}") from e
    return parse_descriptor(raw, str(p))


def load_bundled_descriptor(jar: PathLike) -> Optional[LaunchDescriptor]:
    """Descriptor bundled as an entry of the launch jar. None when the entry is missing."""
    raw = archive.read_entry(jar, DESCRIPTOR_FILE_NAME)
    if raw is None:
        return None
    return parse_descriptor(raw, f"{jar}!/{DESCRIPTOR_FILE_NAME}")


def _jar_argument(invocation: RawInvocation) -> Optional[str]:
    argv = invocation.process_argv
    for i, tok in enumerate(argv[1:-1], start=1):
        if tok == "-jar":
            return argv[i + 1]
    return None


def find_descriptor(
    invocation: RawInvocation,
    explicit: Optional[PathLike] = None,
    workdir: Optional[PathLike] = None,
) -> Optional[LaunchDescriptor]:
    """Locate the descriptor: explicit path, then the ``-jar`` archive, then the working directory.

    An explicitly requested descriptor must exist.
    """
    root = Path(workdir) if workdir is not None else settings.working_dir
    requested = explicit or settings.DESCRIPTOR_PATH
    if requested:
        descriptor = load_descriptor(requested)
        if descriptor is None:
            raise DescriptorError("ERR_DESCRIPTOR_MISSING", f"Launch descriptor not found: {requested}")
        logger.info("descriptor_loaded", source=str(requested))
        return descriptor

    jar = _jar_argument(invocation)
    if jar is not None:
        jar_path = Path(jar) if Path(jar).is_absolute() else root / jar
        try:
            descriptor = load_bundled_descriptor(jar_path)
        except ArchiveReadError as e:
            logger.warning("descriptor_archive_unreadable", jar=str(jar_path), error=e.message)
            descriptor = None
        if descriptor is not None:
            logger.info("descriptor_loaded", source=f"{jar_path}!/{DESCRIPTOR_FILE_NAME}")
            return descriptor

    descriptor = load_descriptor(root / DESCRIPTOR_FILE_NAME)
    if descriptor is not None:
        logger.info("descriptor_loaded", source=str(root / DESCRIPTOR_FILE_NAME))
        return descriptor

    logger.info("descriptor_absent", mode="pass-through")
    return None
