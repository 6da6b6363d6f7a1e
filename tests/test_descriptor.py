import orjson
import pytest
from pydantic import ValidationError

from ornithe_launcher.core.descriptor import (
    find_descriptor,
    load_bundled_descriptor,
    load_descriptor,
    parse_descriptor,
)
from ornithe_launcher.core.errors import DescriptorError
from ornithe_launcher.core.models import LaunchDescriptor, RawInvocation

ARGS = {
    "flap_jar": "libraries/net/ornithemc/flap/flap-0.1.0.jar",
    "main_class": "net.fabricmc.loader.impl.launch.knot.KnotServer",
    "jvm_args": ["-DFabricMcEmu= net.minecraft.server.MinecraftServer "],
}


def test_parse_descriptor_maps_installer_keys():
    descriptor = parse_descriptor(orjson.dumps(ARGS), "test")

    assert descriptor == LaunchDescriptor(
        agent_path=ARGS["flap_jar"],
        main_class=ARGS["main_class"],
        jvm_args=ARGS["jvm_args"],
    )


def test_jvm_args_default_to_empty():
    descriptor = parse_descriptor(b'{"flap_jar": "agent.jar", "main_class": "Boot"}', "test")

    assert descriptor.jvm_args == []


def test_descriptor_is_immutable():
    descriptor = parse_descriptor(orjson.dumps(ARGS), "test")

    with pytest.raises(ValidationError):
        descriptor.main_class = "Other"


@pytest.mark.parametrize("raw, code", [
    (b"{not json", "ERR_DESCRIPTOR_JSON"),
    (b"[1, 2]", "ERR_DESCRIPTOR_SHAPE"),
    (b'{"main_class": "Boot"}', "ERR_DESCRIPTOR_FIELDS"),
    (b'{"flap_jar": "a.jar", "main_class": "Boot", "jvm_args": "-Xmx2G"}', "ERR_DESCRIPTOR_FIELDS"),
])
def test_malformed_descriptor_is_fatal(raw, code):
    with pytest.raises(DescriptorError) as exc:
        parse_descriptor(raw, "test")
    assert exc.value.code == code
    assert exc.value.fatal is True


def test_load_descriptor_absent_file_returns_none(tmp_path):
    assert load_descriptor(tmp_path / "ornithe-args.json") is None


def test_load_bundled_descriptor(tmp_path, make_jar):
    jar = make_jar(tmp_path / "fabric-server-launch.jar", entries={"ornithe-args.json": orjson.dumps(ARGS)})

    assert load_bundled_descriptor(jar).main_class == ARGS["main_class"]


def test_find_descriptor_prefers_bundled_entry_over_loose_file(tmp_path, make_jar):
    make_jar(tmp_path / "launch.jar", entries={"ornithe-args.json": orjson.dumps(ARGS)})
    (tmp_path / "ornithe-args.json").write_bytes(b'{"flap_jar": "x.jar", "main_class": "Loose"}')
    invocation = RawInvocation.from_command(["java", "-jar", "launch.jar", "nogui"])

    assert find_descriptor(invocation).main_class == ARGS["main_class"]


def test_find_descriptor_falls_back_to_working_directory(tmp_path, make_jar):
    make_jar(tmp_path / "launch.jar", entries={"other.txt": b""})
    (tmp_path / "ornithe-args.json").write_bytes(b'{"flap_jar": "x.jar", "main_class": "Loose"}')
    invocation = RawInvocation.from_command(["java", "-jar", "launch.jar"])

    assert find_descriptor(invocation).main_class == "Loose"


def test_find_descriptor_unreadable_jar_is_not_fatal(tmp_path):
    (tmp_path / "launch.jar").write_bytes(b"garbage")
    invocation = RawInvocation.from_command(["java", "-jar", "launch.jar"])

    assert find_descriptor(invocation) is None


def test_find_descriptor_absent_everywhere_is_pass_through():
    invocation = RawInvocation(process_argv=("run.sh", "--nogui"), launch_args=("--nogui",))

    assert find_descriptor(invocation) is None


def test_explicit_descriptor_must_exist(tmp_path):
    invocation = RawInvocation(process_argv=("java",))

    with pytest.raises(DescriptorError) as exc:
        find_descriptor(invocation, explicit=tmp_path / "missing.json")
    assert exc.value.code == "ERR_DESCRIPTOR_MISSING"


def test_explicit_descriptor_from_environment(tmp_path, monkeypatch):
    from ornithe_launcher.core import descriptor as descriptor_mod

    path = tmp_path / "custom.json"
    path.write_bytes(orjson.dumps(ARGS))
    monkeypatch.setattr(descriptor_mod.settings, "DESCRIPTOR_PATH", str(path))

    assert find_descriptor(RawInvocation(process_argv=("java",))).agent_path == ARGS["flap_jar"]


def test_malformed_bundled_descriptor_is_fatal(tmp_path, make_jar):
    make_jar(tmp_path / "launch.jar", entries={"ornithe-args.json": b"{oops"})
    invocation = RawInvocation.from_command(["java", "-jar", "launch.jar"])

    with pytest.raises(DescriptorError):
        find_descriptor(invocation)
