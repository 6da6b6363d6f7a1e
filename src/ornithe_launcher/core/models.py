from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ornithe_launcher.core.constants import LAUNCHER_CLASS, MODULE_OPTIONS, VALUE_OPTIONS


class LaunchDescriptor(BaseModel):
    """What the installer decided: agent jar, real main class, extra JVM args."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")
    agent_path: str = Field(alias="flap_jar", min_length=1)
    main_class: str = Field(min_length=1)
    jvm_args: List[str] = Field(default_factory=list)


class RawInvocation(BaseModel):
    """The command line the supervisor intended, split into JVM part and program arguments."""
    model_config = ConfigDict(frozen=True)
    process_argv: Tuple[str, ...]
    launch_args: Tuple[str, ...] = ()

    @property
    def executable(self) -> str:
        return self.process_argv[0]

    @classmethod
    def from_command(cls, tokens: Sequence[str], launcher_class: str = LAUNCHER_CLASS) -> "RawInvocation":
        """Split a full ``java ...`` command line.

        Program arguments start after the ``-jar <path>`` or ``-m <module>`` pair, after the
        launcher's own class name, or after the first non-option token.
        """
        argv = tuple(tokens)
        if not argv:
            raise ValueError("empty command line")
        i = 1
        while i < len(argv):
            tok = argv[i]
            if tok == "-jar" or tok in MODULE_OPTIONS:
                return cls(process_argv=argv, launch_args=argv[i + 2:])
            if tok in VALUE_OPTIONS:
                i += 2
                continue
            if tok == launcher_class or tok.startswith("--module=") or not tok.startswith("-"):
                return cls(process_argv=argv, launch_args=argv[i + 1:])
            i += 1
        return cls(process_argv=argv)


class FinalCommand(BaseModel):
    model_config = ConfigDict(frozen=True)
    argv: Tuple[str, ...]
    transformed_archive: Optional[str] = None
