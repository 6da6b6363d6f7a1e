"""Read-only helpers for jar archives: manifest attributes, bundled entries, entry listings."""
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from ornithe_launcher.core.constants import CLASS_PATH_ATTRIBUTE, MANIFEST_PATH
from ornithe_launcher.core.errors import ArchiveReadError

PathLike = Union[str, Path]


def _open(path: PathLike) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(path, "r")
    except FileNotFoundError as e:
        raise ArchiveReadError("ERR_ARCHIVE_MISSING", f"Archive not found: {path}") from e
    except zipfile.BadZipFile as e:
        raise ArchiveReadError("ERR_ARCHIVE_CORRUPT", f"Not a valid zip archive: {path}") from e
    except OSError as e:
        raise ArchiveReadError("ERR_ARCHIVE_IO", f"Failed to open archive {path}: {e}") from e


def parse_manifest(text: str) -> Dict[str, str]:
    """Parse the main section of a manifest.

    Keys are lower-cased. Continuation lines (leading single space) are joined
    onto the previous value without the space.
    """
    attributes: Dict[str, str] = {}
    current: Optional[str] = None
    for raw in text.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        if not raw:
            # Blank line ends the main section.
            if attributes:
                break
            continue
        if raw.startswith(" "):
            if current is not None:
                attributes[current] += raw[1:]
            continue
        name, sep, value = raw.partition(":")
        if not sep:
            current = None
            continue
        current = name.strip().lower()
        attributes[current] = value[1:] if value.startswith(" ") else value
    return attributes


def read_manifest(path: PathLike) -> Dict[str, str]:
    with _open(path) as zf:
        try:
            raw = zf.read(MANIFEST_PATH)
        except KeyError as e:
            raise ArchiveReadError("ERR_MANIFEST_MISSING", f"{path} has no {MANIFEST_PATH}") from e
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveReadError("ERR_MANIFEST_IO", f"Failed to read manifest of {path}: {e}") from e
    return parse_manifest(raw.decode("utf-8", errors="replace"))


def read_manifest_attribute(path: PathLike, name: str) -> Optional[str]:
    value = read_manifest(path).get(name.lower())
    return value.strip() if value is not None else None


def read_classpath(path: PathLike) -> List[str]:
    """Return the manifest ``Class-Path`` entries of ``path`` in declared order."""
    value = read_manifest(path).get(CLASS_PATH_ATTRIBUTE.lower())
    if not value:
        return []
    return value.split()


def read_entry(path: PathLike, name: str) -> Optional[bytes]:
    """Return the bytes of entry ``name`` or None when the archive doesn't contain it."""
    with _open(path) as zf:
        try:
            return zf.read(name)
        except KeyError:
            return None
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveReadError("ERR_ENTRY_IO", f"Failed to read {name} from {path}: {e}") from e


def list_file_entries(path: PathLike) -> List[str]:
    """All regular-file entry names, directories excluded."""
    with _open(path) as zf:
        return [info.filename for info in zf.infolist() if not info.is_dir()]
