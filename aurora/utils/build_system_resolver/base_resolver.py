import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class BuildSystemKind(Enum):
    """Supported build systems. Values are the names accepted in aurora.json."""

    MAKE = "make"
    AUTOTOOLS = "autotools"
    CARGO = "cargo"
    CMAKE = "cmake"
    MESON = "meson"
    NINJA = "ninja"
    NIMBLE = "nimble"
    STACK = "stack"

    @classmethod
    def from_name(cls, name):
        """Look up a kind by manifest name, ignoring case. Returns None if unknown."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class BuildPlan:
    kind: BuildSystemKind
    extra_flags: Tuple[str, ...]
    source_dir: str
    package_name: str
    # None when the kind came from aurora.json rather than a marker file
    build_file: Optional[str] = None

    @property
    def build_file_path(self):
        if self.build_file is None:
            return None
        return os.path.join(self.source_dir, self.build_file)


@dataclass(frozen=True)
class BuildStep:
    """One external command of a recipe.

    ``fallback`` runs once if the command exits non-zero. Its own failure
    is final unless ``fallback_fatal`` is False, in which case the recipe
    moves on to the next step.
    """

    stage: str
    command: Tuple[str, ...]
    cwd: str
    fallback: Optional["BuildStep"] = None
    fallback_fatal: bool = True


class BaseResolver(ABC):
    """Build recipe and binary search strategy for one build system."""

    kind: BuildSystemKind
    label: str
    marker_files: Tuple[str, ...] = ()
    # Subdirectories of the source root the recipe expects to exist.
    output_dirs: Tuple[str, ...] = ()

    def find_marker(self, source_dir):
        """Return the first marker file present in source_dir, or None."""
        for name in self.marker_files:
            if os.path.isfile(os.path.join(source_dir, name)):
                return name
        return None

    @abstractmethod
    def get_build_steps(self, plan):
        """Return the ordered BuildSteps for the plan."""

    def find_binary(self, plan):
        """Return the path of the built executable, or None.

        The default expects a file named after the package at the source root.
        """
        return _existing_file(os.path.join(plan.source_dir, plan.package_name))


def _existing_file(path):
    return path if os.path.isfile(path) else None


def find_file_recursive(directory, name):
    """Depth-first search for a file called ``name`` under ``directory``.

    Sibling order is whatever the filesystem returns; the first hit wins.
    """
    try:
        entries = list(os.scandir(directory))
    except OSError:
        return None

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            found = find_file_recursive(entry.path, name)
            if found:
                return found
        elif entry.name == name and entry.is_file():
            return entry.path
    return None
