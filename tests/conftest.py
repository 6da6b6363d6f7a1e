import zipfile

import pytest


@pytest.fixture(autouse=True)
def launcher_env(monkeypatch, tmp_path):
    for key in ("ORNITHE_DESCRIPTOR_PATH", "ORNITHE_WORKING_DIR", "ORNITHE_CACHE_DIR"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _manifest_text(attributes):
    lines = ["Manifest-Version: 1.0"]
    for name, value in attributes.items():
        line = f"{name}: {value}"
        # Wrap like the installer does: 72 chars, continuation starts with a space.
        first, rest = line[:72], line[72:]
        lines.append(first)
        while rest:
            lines.append(" " + rest[:71])
            rest = rest[71:]
    return "\r\n".join(lines) + "\r\n\r\n"


@pytest.fixture
def make_jar():
    """Write a jar with the given entries; ``manifest`` maps attribute names to values."""

    def _make(path, entries=None, manifest=None, dirs=()):
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            for d in dirs:
                zf.writestr(d.rstrip("/") + "/", b"")
            if manifest is not None:
                zf.writestr("META-INF/MANIFEST.MF", _manifest_text(manifest))
            for name, data in (entries or {}).items():
                zf.writestr(name, data)
        return path

    return _make


@pytest.fixture
def jar_names():
    def _names(path):
        with zipfile.ZipFile(path) as zf:
            return sorted(i.filename for i in zf.infolist() if not i.is_dir())

    return _names
