"""Glob-based ignore rules for treesnap.

Each line of the ignore file expands into a small fixed set of canonical
globs. Every glob is compiled on its own and a path is excluded when any of
them matches.
"""

import logging
from pathlib import Path
from typing import List, Optional

from pathspec import PathSpec

from .constants import IGNORE_FILE, TREESNAP_DIR
from .errors import MalformedIgnoreRule

logger = logging.getLogger(__name__)


# Written to the ignore file by `treesnap init`
DEFAULT_IGNORE = """\
# Build outputs
target/
build/
dist/

# Dependencies and version control
node_modules/
.git/
.github/
.gitignore

# OS files
.DS_Store

# Binaries and logs
*.o
*.so
*.dll
*.exe
*.log
"""


def expand_pattern(pattern: str) -> List[str]:
    """Expand one ignore line into the globs that implement it.

    A trailing slash marks a directory, which is excluded together with its
    contents at any depth. Anything else is a path glob matched at the top
    level and at any depth.

    Examples:
        >>> expand_pattern("build/")
        ['build/**', '**/build/**', 'build', '**/build']
        >>> expand_pattern("*.log")
        ['*.log', '**/*.log']

    Raises:
        MalformedIgnoreRule: For negations and patterns that are only slashes
    """
    if pattern.startswith("!"):
        raise MalformedIgnoreRule(pattern, "negation is not supported")
    if not pattern.strip("/"):
        raise MalformedIgnoreRule(pattern, "empty pattern")
    if pattern.endswith("/"):
        name = pattern.rstrip("/")
        return [f"{name}/**", f"**/{name}/**", name, f"**/{name}"]
    return [pattern, f"**/{pattern}"]


def compile_pattern(glob: str) -> PathSpec:
    """Compile a single glob.

    Raises:
        MalformedIgnoreRule: If the glob is empty, a negation, or rejected
            by the matcher
    """
    if not glob or glob.strip("/") == "":
        raise MalformedIgnoreRule(glob, "empty pattern")
    if glob.startswith("!"):
        raise MalformedIgnoreRule(glob, "negation is not supported")
    try:
        spec = PathSpec.from_lines("gitwildmatch", [glob])
    except ValueError as e:
        raise MalformedIgnoreRule(glob, str(e)) from e
    if not spec.patterns or not any(p.include for p in spec.patterns):
        raise MalformedIgnoreRule(glob, "pattern matches nothing")
    return spec


class IgnoreRuleSet:
    """Compiled ignore rules; a path is ignored if any rule matches."""

    def __init__(self, globs: Optional[List[str]] = None):
        self.globs: List[str] = []
        self._specs: List[PathSpec] = []
        for glob in globs or ():
            self.add(glob)

    def add(self, glob: str) -> None:
        """Compile and append a glob. Raises MalformedIgnoreRule."""
        spec = compile_pattern(glob)
        self.globs.append(glob)
        self._specs.append(spec)

    def matches(self, relpath: str) -> bool:
        """Check if a project-relative POSIX path is excluded."""
        relpath = relpath.strip("/")
        if not relpath:
            return False
        return any(spec.match_file(relpath) for spec in self._specs)

    def __len__(self) -> int:
        return len(self.globs)


def compile_rules(contents: str) -> IgnoreRuleSet:
    """Compile ignore-file contents into a rule set.

    Blank lines and `#` comments are skipped. Malformed globs are dropped
    and compilation continues. The control directory rule is always added.
    """
    rules = IgnoreRuleSet()
    for raw in contents.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        try:
            globs = expand_pattern(line)
        except MalformedIgnoreRule as e:
            logger.debug("Dropping ignore rule: %s", e)
            continue
        for glob in globs:
            try:
                rules.add(glob)
            except MalformedIgnoreRule as e:
                logger.debug("Dropping ignore rule: %s", e)

    for glob in expand_pattern(f"{TREESNAP_DIR}/"):
        rules.add(glob)
    return rules


def load_rules(root: Path) -> IgnoreRuleSet:
    """Read the project's ignore file (if any) and compile it.

    Rules are rebuilt on every call so edits take effect immediately.
    """
    ignore_file = root / IGNORE_FILE
    contents = ""
    if ignore_file.is_file():
        try:
            contents = ignore_file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Cannot read %s, using no ignore rules: %s", ignore_file, e)
    return compile_rules(contents)
