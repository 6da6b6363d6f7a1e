"""
Centralized constants for the Ornithe server launcher.

File names and property keys here are shared with the installer that
prepares the server directory, so changing them breaks existing installs.
"""

# ============================================================================
# Launch descriptor
# ============================================================================

DESCRIPTOR_FILE_NAME = "ornithe-args.json"
"""Name of the descriptor, both as a loose file and as an entry bundled in the launch jar."""

LAUNCHER_CLASS = "net.ornithemc.server_launcher.ServerLauncher"
"""Fully-qualified class name the supervisor uses when it starts the shim directly."""


# ============================================================================
# Server jar configuration
# ============================================================================

SERVER_PROPERTIES_FILES = (
    "fabric-server-launcher.properties",
    "quilt-server-launcher.properties",
)
"""Properties files checked in priority order."""

SERVER_JAR_KEY = "serverJar"

DEFAULT_SERVER_JAR = "server.jar"
"""Mojang's default server file name; most hosts don't allow renaming it."""


# ============================================================================
# Archive layout
# ============================================================================

MANIFEST_PATH = "META-INF/MANIFEST.MF"

CLASS_PATH_ATTRIBUTE = "Class-Path"

MANIFEST_LINE_LIMIT = 72
"""Manifest lines wrap at 72 bytes; continuation lines start with one space."""

DEFAULT_ARCHIVE_SUFFIX = ".jar"


# ============================================================================
# Transform cache
# ============================================================================

DEFAULT_CACHE_DIR = ".ornithe/transformedServerJars"

DEFAULT_LIBRARY_PREFIX = "libraries"
"""Only classpath entries under this prefix are treated as vendored libraries."""

HASH_CHUNK_BYTES = 1024 * 1024

LOCK_DIR_NAME = "locks"
"""Subdirectory of the cache root holding per-entry lock files."""

DEFAULT_LOCK_TIMEOUT_SEC = 30.0


# ============================================================================
# Child command line
# ============================================================================

GAME_JAR_PROPERTIES = (
    "fabric.gameJarPath",
    "loader.gameJarPath",
)
"""System properties the loader reads to find the (transformed) game jar."""

JAVAAGENT_FLAG = "-javaagent:"

# JVM options that consume the following token as their value.
VALUE_OPTIONS = frozenset({
    "-cp",
    "-classpath",
    "--class-path",
    "-p",
    "--module-path",
    "--add-modules",
    "--add-opens",
    "--add-exports",
    "--add-reads",
    "--patch-module",
    "--limit-modules",
    "--upgrade-module-path",
    "--source",
})

# Like -jar, these end the JVM options: the token after the module name is a program argument.
MODULE_OPTIONS = frozenset({"-m", "--module"})
