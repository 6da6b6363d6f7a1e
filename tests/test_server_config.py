from ornithe_launcher.core.server_config import find_properties_file, resolve_server_jar
from ornithe_launcher.core.utils.properties import parse_properties


def test_default_when_no_properties_file(tmp_path):
    assert find_properties_file(tmp_path) is None
    assert resolve_server_jar(tmp_path) == "server.jar"


def test_default_uses_current_directory(tmp_path):
    (tmp_path / "fabric-server-launcher.properties").write_text("serverJar=from-cwd.jar\n")

    assert resolve_server_jar() == "from-cwd.jar"


def test_fabric_file_takes_priority(tmp_path):
    (tmp_path / "fabric-server-launcher.properties").write_text("serverJar=fabric.jar\n")
    (tmp_path / "quilt-server-launcher.properties").write_text("serverJar=quilt.jar\n")

    assert resolve_server_jar(tmp_path) == "fabric.jar"


def test_quilt_file_used_as_fallback(tmp_path):
    (tmp_path / "quilt-server-launcher.properties").write_text("# generated\nserverJar = versions/1.12.2.jar\n")

    assert resolve_server_jar(tmp_path) == "versions/1.12.2.jar"


def test_missing_key_falls_back_to_default(tmp_path):
    (tmp_path / "fabric-server-launcher.properties").write_text("launch.mainClass=a.B\n")

    assert resolve_server_jar(tmp_path) == "server.jar"


def test_parse_properties_syntax_variants():
    text = "\n".join([
        "# comment",
        "! also a comment",
        "a=1",
        "b : 2",
        "c 3",
        "path=C:\\\\servers\\\\mc.jar",
        "long=first \\",
        "    second",
        "key\\ with\\ space=v",
        "uni=\\u0041",
        "empty=",
    ])

    assert parse_properties(text) == {
        "a": "1",
        "b": "2",
        "c": "3",
        "path": "C:\\servers\\mc.jar",
        "long": "first second",
        "key with space": "v",
        "uni": "A",
        "empty": "",
    }


def test_parse_properties_last_value_wins():
    assert parse_properties("k=1\nk=2\n") == {"k": "2"}
