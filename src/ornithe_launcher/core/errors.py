class LauncherError(RuntimeError):
    """Base error for a launch attempt.

    ``fatal`` tells the entry point whether the launch must be aborted before
    anything is spawned.
    """

    fatal = True

    def __init__(self, code: str, message: str, hint: str = ""):
        super().__init__(message)
        self.code = code
        self.message = message
        self.hint = hint


class ArchiveReadError(LauncherError):
    """An archive or its manifest could not be read. Callers degrade instead of aborting."""

    fatal = False


class DescriptorError(LauncherError):
    """The launch descriptor exists but is malformed."""


class TransformError(LauncherError):
    """The server jar could not be transformed into the cache."""


class SpawnError(LauncherError):
    """The child process could not be started."""


class LibraryReadError(ArchiveReadError):
    """A classpath library could not be listed. The transform is skipped, the launch goes on."""
