"""
Content-addressed cache of server jars stripped of vendored library classes.

The server jar shades some of the libraries that are also put on the
classpath. Loading both gives duplicate class definitions, so every entry
that a library under ``libraries/`` provides is removed from a copy of the
server jar. The copy is keyed by the SHA-256 of the original jar, so the
work happens once per distinct jar and is reused by every later launch.

A file at the final cache path is always complete: the copy is built under a
temporary name and moved into place with ``os.replace`` only after the
filtered copy is fully written. Locks live in a ``locks/`` subdirectory so
the cache root holds nothing but finished jars.
"""
import hashlib
import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Iterable, Optional, Set, Union

from filelock import FileLock, Timeout

from ornithe_launcher.core import archive
from ornithe_launcher.core.constants import DEFAULT_ARCHIVE_SUFFIX, HASH_CHUNK_BYTES, LOCK_DIR_NAME
from ornithe_launcher.core.errors import ArchiveReadError, LibraryReadError, TransformError
from ornithe_launcher.core.settings import settings
from ornithe_launcher.core.utils.logging import get_logger

logger = get_logger("ornithe.transform_cache")

PathLike = Union[str, Path]


def cache_key(source: PathLike) -> str:
    """Lowercase hex SHA-256 of the file content."""
    digest = hashlib.sha256()
    try:
        with open(source, "rb") as f:
            for chunk in iter(lambda: f.read(HASH_CHUNK_BYTES), b""):
                digest.update(chunk)
    except OSError as e:
        raise TransformError(
            "ERR_SOURCE_READ",
            f"Failed to read server jar {source}: {e}",
            hint="Check the serverJar property or place server.jar in the working directory.",
        ) from e
    return digest.hexdigest()


def cache_entry_path(source: PathLike, cache_root: PathLike) -> Path:
    suffix = Path(source).suffix or DEFAULT_ARCHIVE_SUFFIX
    return Path(cache_root) / f"{cache_key(source)}{suffix}"


def is_library(entry: str, prefix: str) -> bool:
    parts = Path(entry.replace("\\", "/")).parts
    return bool(parts) and parts[0] == prefix


def collect_library_entries(
    strip_list: Iterable[str],
    *,
    library_prefix: str,
    base_dir: Path,
) -> Set[str]:
    """Entry names provided by every vendored library in ``strip_list``.

    An unreadable library raises ``LibraryReadError``; nothing has been
    written at that point, so callers can skip the transform.
    """
    names: Set[str] = set()
    for lib in strip_list:
        if not is_library(lib, library_prefix):
            continue
        lib_path = Path(lib)
        if not lib_path.is_absolute():
            lib_path = base_dir / lib_path
        try:
            names.update(archive.list_file_entries(lib_path))
        except ArchiveReadError as e:
            raise LibraryReadError(e.code, f"Failed to list library {lib}: {e.message}") from e
    return names


def copy_without(source: Path, target: Path, names: Set[str]) -> int:
    """Write ``source`` to ``target`` minus the file entries in ``names``.

    Names missing from ``source`` are ignored. With nothing to drop the copy is
    byte-for-byte. Returns the number of removed entries.
    """
    with zipfile.ZipFile(source, "r") as zin:
        doomed = sum(1 for i in zin.infolist() if not i.is_dir() and i.filename in names)
        if doomed:
            with zipfile.ZipFile(target, "w") as zout:
                zout.comment = zin.comment
                for info in zin.infolist():
                    if info.is_dir() or info.filename not in names:
                        zout.writestr(info, zin.read(info))
    if not doomed:
        shutil.copyfile(source, target)
    return doomed


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("temp_cleanup_failed", path=str(path), error=str(e))


def _build_entry(source: Path, entry: Path, names: Set[str]) -> Path:
    # Another launcher may have finished while we waited for the lock.
    if entry.is_file():
        logger.info("transform_cache_hit", entry=str(entry), after_wait=True)
        return entry

    fd, tmp_name = tempfile.mkstemp(dir=entry.parent, prefix=f".{entry.stem}.", suffix=".tmp")
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        removed = copy_without(source, tmp, names)
        # Both archives are closed here; Windows refuses to replace open files.
        os.replace(tmp, entry)
    except (OSError, zipfile.BadZipFile) as e:
        _unlink_quietly(tmp)
        raise TransformError("ERR_TRANSFORM_IO", f"Failed to transform {source}: {e}") from e
    except BaseException:
        _unlink_quietly(tmp)
        raise

    logger.info(
        "transform_cache_stored",
        entry=str(entry),
        source=str(source),
        library_entries=len(names),
        removed=removed,
    )
    return entry


def ensure_transformed(
    source: PathLike,
    strip_list: Iterable[str],
    cache_root: Optional[PathLike] = None,
    *,
    library_prefix: Optional[str] = None,
    base_dir: Optional[PathLike] = None,
    lock_timeout: Optional[float] = None,
) -> Path:
    """Return the cached, stripped copy of ``source``, building it on first use.

    An existing file at the cache path is returned as-is without reading the
    libraries or validating its content. ``LibraryReadError`` is raised before
    anything is written to the cache; every other failure is a ``TransformError``.
    """
    base = Path(base_dir) if base_dir is not None else settings.working_dir
    source_path = Path(source)
    if not source_path.is_absolute():
        source_path = base / source_path
    root = Path(cache_root) if cache_root is not None else settings.cache_root
    prefix = library_prefix or settings.LIBRARY_PREFIX
    timeout = settings.LOCK_TIMEOUT_SEC if lock_timeout is None else lock_timeout

    entry = cache_entry_path(source_path, root)
    if entry.is_file():
        logger.info("transform_cache_hit", entry=str(entry))
        return entry

    logger.info("transform_cache_miss", entry=str(entry), source=str(source_path))
    names = collect_library_entries(strip_list, library_prefix=prefix, base_dir=base)

    lock_dir = root / LOCK_DIR_NAME
    try:
        lock_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TransformError("ERR_CACHE_DIR", f"Failed to create cache directory {root}: {e}") from e

    lock = FileLock(str(lock_dir / f"{entry.name}.lock"), timeout=timeout)
    try:
        with lock:
            return _build_entry(source_path, entry, names)
    except Timeout:
        # Safe without the lock: the final path only ever receives complete files.
        logger.warning("transform_cache_lock_timeout", lock=lock.lock_file, timeout=timeout)
        return _build_entry(source_path, entry, names)
