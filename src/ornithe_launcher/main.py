import argparse
import shlex
import sys
from pathlib import Path
from typing import List, Optional

from ornithe_launcher.core.command import build_command
from ornithe_launcher.core.descriptor import find_descriptor
from ornithe_launcher.core.errors import LauncherError
from ornithe_launcher.core.models import RawInvocation
from ornithe_launcher.core.process import launch
from ornithe_launcher.core.settings import settings
from ornithe_launcher.core.utils.logging import configure_logging, get_logger
from ornithe_launcher.version import __version__

logger = get_logger("ornithe.main")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ornithe-launcher",
        description="Start a Java server with the Ornithe agent and main class injected.",
        usage="%(prog)s [options] -- JAVA [JVM_OPTIONS] -jar LAUNCH_JAR [ARGS]",
    )
    parser.add_argument("--descriptor", help="Path to ornithe-args.json (default: bundled in the launch jar)")
    parser.add_argument("--cache-root", help="Directory for transformed server jars")
    parser.add_argument("--server-jar", help="Server jar to transform (default: from launcher properties)")
    parser.add_argument("--workdir", help="Server directory (default: current directory)")
    parser.add_argument("--dry-run", action="store_true", help="Print the final command instead of running it")
    parser.add_argument("--log-level", help="Log level (default: ORNITHE_LOG_LEVEL or INFO)")
    parser.add_argument("--log-json", action="store_true", default=None, help="Emit JSON log lines")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("command", nargs=argparse.REMAINDER)
    return parser


def run(
    invocation: RawInvocation,
    *,
    descriptor_path: Optional[str] = None,
    cache_root: Optional[str] = None,
    server_jar: Optional[str] = None,
    workdir: Optional[str] = None,
    dry_run: bool = False,
    stdout=None,
) -> int:
    out = stdout or sys.stdout
    base = Path(workdir) if workdir else settings.working_dir
    try:
        descriptor = find_descriptor(invocation, explicit=descriptor_path, workdir=base)
        command = build_command(
            invocation,
            descriptor,
            server_jar=server_jar,
            cache_root=cache_root,
            workdir=base,
        )
        if dry_run:
            print(shlex.join(command.argv), file=out)
            return 0
        logger.debug("final_command", command=shlex.join(command.argv))
        return launch(command, cwd=str(base))
    except LauncherError as e:
        logger.error("launch_aborted", code=e.code, error=e.message, hint=e.hint or None)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    ns = parser.parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=ns.log_level, json_logs=ns.log_json)

    command = list(ns.command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        parser.error("missing server command line after --")

    return run(
        RawInvocation.from_command(command),
        descriptor_path=ns.descriptor,
        cache_root=ns.cache_root,
        server_jar=ns.server_jar,
        workdir=ns.workdir,
        dry_run=ns.dry_run,
    )


if __name__ == "__main__":
    raise SystemExit(main())
