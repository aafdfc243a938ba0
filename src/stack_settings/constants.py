"""Constants for stack-settings."""

# Project root marker (found by walking up from the working directory)
REPO_ROOT_MARKER = "pnpm-workspace.yaml"

# Optional configuration file at the project root
CONFIG_FILE = ".stack-settings.yaml"

# Environment overrides
ROOT_ENV_VAR = "STACK_SETTINGS_ROOT"
DEBUG_ENV_VAR = "DEBUG"

# Files that require a git commit check before modification (root-relative)
DEFAULT_PROTECTED_FILES = [
    "packages/db/package.json",
    "packages/db/src/client.ts",
    "packages/db/prisma/schema.prisma",
    "packages/db/prisma.config.ts",
    "packages/features/src/auth/auth.ts",
    "packages/platform/src/server.ts",
]

# Packages that require all files committed before modification
DEFAULT_PROTECTED_PACKAGES = [
    "packages/db",
    "packages/features",
    "packages/platform",
]

# Version
SETTINGS_VERSION = "0.1.0"
