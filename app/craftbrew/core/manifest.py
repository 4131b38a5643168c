"""Manifest (Brewfile) parsing, merging and rendering.

A manifest is a line-oriented text file. Each non-blank, non-comment line
declares one package::

    tap "homebrew/cask-fonts"
    brew "git"
    brew "postgresql@16", restart_service: true
    cask "firefox", args: ["--no-quarantine"]
    mas "Xcode", id: 497799835

Several manifests are merged into a single DesiredState. Two manifests may
declare the same package only if they declare it identically.
"""

import hashlib
import logging
import os
import re
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from craftbrew.core.errors import (
    ConfigError,
    ManifestConflictError,
    ManifestError,
    ManifestNotFoundError,
    ManifestParseError,
)
from craftbrew.core.paths import expand_path
from craftbrew.models.package import (
    KIND_ORDER,
    AttributeValue,
    Identity,
    Package,
    PackageKind,
    sort_packages,
)
from craftbrew.models.state import DesiredState, Manifest

logger = logging.getLogger(__name__)

_STRING = r'"(?:[^"\\]|\\.)*"'

_HEAD_RE = re.compile(r'^(?P<kind>[a-z_]+)\s+"(?P<name>(?:[^"\\]|\\.)*)"(?P<rest>.*)$')
_ATTR_RE = re.compile(
    r"\s*,\s*(?P<key>[a-z_]+)\s*:\s*"
    rf"(?P<value>{_STRING}|\[\s*(?:{_STRING}\s*(?:,\s*{_STRING}\s*)*)?\]|-?\d+|true|false)"
)
_LIST_ITEM_RE = re.compile(_STRING)
_ESCAPE_RE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "t": "\t"}


def _unescape(quoted: str) -> str:
    """Strip the quotes from a string literal and resolve backslash escapes."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), quoted[1:-1])


def _escape(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _parse_value(raw: str) -> AttributeValue:
    if raw.startswith('"'):
        return _unescape(raw)
    if raw.startswith("["):
        return tuple(_unescape(item) for item in _LIST_ITEM_RE.findall(raw))
    if raw == "true":
        return True
    if raw == "false":
        return False
    return int(raw)


def parse_line(line: str) -> tuple[PackageKind, str, dict[str, Any]] | None:
    """Parse a single manifest line.

    Args:
        line: Raw line content (without trailing newline).

    Returns:
        Tuple of (kind, name, attributes), or None for blank and comment lines.

    Raises:
        ValueError: If the line is not a valid declaration.
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    head = _HEAD_RE.match(text)
    if head is None:
        msg = 'expected a declaration like: brew "name"'
        raise ValueError(msg)

    keyword = head.group("kind")
    try:
        kind = PackageKind.from_keyword(keyword)
    except ValueError:
        allowed = ", ".join(k.keyword for k in KIND_ORDER)
        msg = f"unknown kind '{keyword}' (expected one of: {allowed})"
        raise ValueError(msg) from None

    name = _unescape(f'"{head.group("name")}"')
    rest = head.group("rest")

    attributes: dict[str, Any] = {}
    pos = 0
    while True:
        attr = _ATTR_RE.match(rest, pos)
        if attr is None:
            break
        key = attr.group("key")
        if key in attributes:
            msg = f"duplicate attribute '{key}'"
            raise ValueError(msg)
        attributes[key] = _parse_value(attr.group("value"))
        pos = attr.end()

    trailing = rest[pos:].strip()
    if trailing and not trailing.startswith("#"):
        msg = f"unexpected trailing content: {trailing!r}"
        raise ValueError(msg)

    return kind, name, attributes


def parse_manifest(path: Path) -> Manifest:
    """Parse a manifest file.

    Args:
        path: Path of the manifest file.

    Returns:
        Parsed Manifest with declarations in file order.

    Raises:
        ManifestNotFoundError: If the file does not exist.
        ManifestParseError: If any line is invalid.
        ManifestError: If the file cannot be read.
    """
    if not path.is_file():
        raise ManifestNotFoundError(
            f"Manifest not found: {path}",
            hint="Pass an existing file with --manifests or choose a profile with --system.",
        )

    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}") from e

    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ManifestParseError(path, None, f"not valid UTF-8 ({e.reason})") from e

    packages: list[Package] = []
    for line_no, line in enumerate(content.splitlines(), start=1):
        try:
            parsed = parse_line(line)
            if parsed is None:
                continue
            kind, name, attributes = parsed
            packages.append(Package.create(kind, name, attributes, source=str(path)))
        except ValueError as e:
            raise ManifestParseError(path, line_no, str(e)) from e

    logger.debug("Parsed %d declarations from %s", len(packages), path)
    return Manifest(
        path=path,
        packages=tuple(packages),
        content_hash=hashlib.sha256(raw).hexdigest(),
    )


def _format_attributes(attributes: tuple[tuple[str, AttributeValue], ...]) -> str:
    if not attributes:
        return "no attributes"
    return ", ".join(f"{key}: {_render_value(value)}" for key, value in attributes)


def merge_manifests(manifests: Iterable[Manifest]) -> DesiredState:
    """Merge parsed manifests into a single desired state.

    Identical declarations of one package collapse into one. The result,
    and the error raised for conflicts, do not depend on manifest order.

    Args:
        manifests: Parsed manifests.

    Returns:
        Merged DesiredState.

    Raises:
        ManifestConflictError: If a package is declared with different
            attributes.
    """
    ordered = tuple(sorted(manifests, key=lambda m: str(m.path)))

    grouped: dict[Identity, list[Package]] = {}
    for manifest in ordered:
        for pkg in manifest.packages:
            grouped.setdefault(pkg.identity, []).append(pkg)

    merged: set[Package] = set()
    for identity in sorted(grouped, key=lambda i: (KIND_ORDER.index(i[0]), i[1])):
        declarations = sorted(grouped[identity], key=lambda p: p.source or "")
        variants = sorted({p.attributes for p in declarations}, key=repr)
        if len(variants) > 1:
            sources = sorted({p.source or "<unknown>" for p in declarations})
            detail = " vs ".join(_format_attributes(v) for v in variants)
            raise ManifestConflictError(str(declarations[0]), sources, detail)
        merged.add(declarations[0])

    return DesiredState(packages=frozenset(merged), manifests=ordered)


def load_manifests(paths: Sequence[Path]) -> DesiredState:
    """Parse and merge manifest files.

    Args:
        paths: Manifest file paths. The same file listed twice is read once.

    Returns:
        Merged DesiredState.

    Raises:
        ManifestNotFoundError: If a file does not exist.
        ManifestParseError: If a file contains an invalid line.
        ManifestConflictError: If manifests disagree about a package.
    """
    seen: set[Path] = set()
    manifests: list[Manifest] = []
    for path in paths:
        key = path.resolve()
        if key in seen:
            continue
        seen.add(key)
        manifests.append(parse_manifest(path))

    desired = merge_manifests(manifests)
    logger.info(
        "Loaded %d packages from %d manifest(s)", len(desired.packages), len(manifests)
    )
    return desired


def resolve_manifest_paths(names: Iterable[str], manifests_dir: Path) -> list[Path]:
    """Resolve manifest names to file paths.

    Absolute paths and existing relative paths are used as given; any
    other name is looked up inside ``manifests_dir``.

    Args:
        names: Manifest names or paths.
        manifests_dir: Directory searched for bare names.

    Returns:
        Resolved paths, in input order.
    """
    resolved: list[Path] = []
    for name in names:
        candidate = expand_path(name.strip())
        if candidate.is_absolute() or candidate.exists():
            resolved.append(candidate)
        else:
            resolved.append(manifests_dir / candidate)
    return resolved


def resolve_profile(profile: str, profiles: Mapping[str, Sequence[str]]) -> list[str]:
    """Look up the manifest names that make up a profile.

    Args:
        profile: Profile name (e.g. 'dev').
        profiles: Available profiles.

    Returns:
        Manifest names of the profile.

    Raises:
        ConfigError: If the profile is unknown.
    """
    try:
        return list(profiles[profile])
    except KeyError:
        available = ", ".join(sorted(profiles))
        raise ConfigError(
            f"Unknown profile '{profile}'",
            hint=f"Available profiles: {available}",
        ) from None


def _render_value(value: AttributeValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return _escape(value)
    return "[" + ", ".join(_escape(item) for item in value) + "]"


def render_package(pkg: Package) -> str:
    """Render one package as a manifest declaration line."""
    line = f"{pkg.kind.keyword} {_escape(pkg.name)}"
    for key, value in pkg.attributes:
        line += f", {key}: {_render_value(value)}"
    return line


def render_manifest(packages: Iterable[Package], header: str | None = None) -> str:
    """Render packages as manifest text.

    Packages are grouped by kind (taps, formulae, casks, store apps) and
    sorted by name, so the output is stable and parses back to the same
    identities.

    Args:
        packages: Packages to render.
        header: Optional comment placed at the top of the file.

    Returns:
        Manifest text ending with a newline.
    """
    lines: list[str] = []
    if header:
        lines.extend(f"# {h}".rstrip() for h in header.splitlines())

    current: PackageKind | None = None
    for pkg in sort_packages(packages):
        if pkg.kind != current:
            if lines:
                lines.append("")
            current = pkg.kind
        lines.append(render_package(pkg))

    return "\n".join(lines) + "\n"


def write_manifest(text: str, path: Path) -> Path:
    """Write manifest text to a file atomically.

    Args:
        text: Manifest content.
        path: Destination path.

    Returns:
        Path where the manifest was written.

    Raises:
        ManifestError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(text)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ManifestError(f"Failed to write manifest {path}: {e}") from e

    return path
