"""Administrative settings tool for the template monorepo."""

from .constants import SETTINGS_VERSION as __version__
