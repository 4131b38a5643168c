"""Package models for declared and installed package state.

This module defines the core data structures for representing packages
of every supported kind (formulae, casks, taps and App Store apps).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Attribute values accepted in manifests and snapshots
AttributeValue = str | int | bool | tuple[str, ...]


class PackageKind(Enum):
    """Enumeration of supported package kinds.

    Attributes:
        FORMULA: Library or command-line tool (``brew``).
        CASK: GUI application bundle (``cask``).
        TAP: Third-party repository source (``tap``).
        STORE_APP: Mac App Store application (``mas``).
    """

    FORMULA = "formula"
    CASK = "cask"
    TAP = "tap"
    STORE_APP = "store_app"

    @property
    def keyword(self) -> str:
        """Manifest keyword that declares a package of this kind."""
        return _KEYWORDS[self]

    @property
    def label(self) -> str:
        """Human-readable label (e.g. 'Formula', 'StoreApp')."""
        return _LABELS[self]

    @classmethod
    def from_keyword(cls, keyword: str) -> PackageKind:
        """Look up a kind by its manifest keyword.

        Args:
            keyword: Manifest keyword ('brew', 'cask', 'tap' or 'mas').

        Returns:
            Matching PackageKind.

        Raises:
            ValueError: If the keyword is not recognised.
        """
        for kind, kw in _KEYWORDS.items():
            if kw == keyword:
                return kind
        msg = f"Unknown package kind '{keyword}'"
        raise ValueError(msg)


_KEYWORDS: dict[PackageKind, str] = {
    PackageKind.FORMULA: "brew",
    PackageKind.CASK: "cask",
    PackageKind.TAP: "tap",
    PackageKind.STORE_APP: "mas",
}

_LABELS: dict[PackageKind, str] = {
    PackageKind.FORMULA: "Formula",
    PackageKind.CASK: "Cask",
    PackageKind.TAP: "Tap",
    PackageKind.STORE_APP: "StoreApp",
}

# Sort order used for deterministic output (taps first, like a Brewfile)
KIND_ORDER: tuple[PackageKind, ...] = (
    PackageKind.TAP,
    PackageKind.FORMULA,
    PackageKind.CASK,
    PackageKind.STORE_APP,
)

# Kind-specific attribute schema: attribute name -> expected value type.
# ``list`` stands for a list of strings.
# ``version`` is recorded and compared between manifests, but installs always
# get the current version; the client warns when one is declared.
ATTRIBUTE_SCHEMA: dict[PackageKind, dict[str, type]] = {
    PackageKind.FORMULA: {
        "version": str,
        "args": list,
        "link": bool,
        "restart_service": bool,
    },
    PackageKind.CASK: {
        "version": str,
        "args": list,
        "greedy": bool,
    },
    PackageKind.TAP: {
        "url": str,
    },
    PackageKind.STORE_APP: {
        "id": int,
        "version": str,
    },
}

REQUIRED_ATTRIBUTES: dict[PackageKind, frozenset[str]] = {
    PackageKind.FORMULA: frozenset(),
    PackageKind.CASK: frozenset(),
    PackageKind.TAP: frozenset(),
    PackageKind.STORE_APP: frozenset({"id"}),
}

Identity = tuple[PackageKind, str]


def validate_attributes(kind: PackageKind, attributes: dict[str, Any]) -> None:
    """Validate attributes against the schema of a package kind.

    Args:
        kind: Package kind the attributes belong to.
        attributes: Attribute mapping to validate.

    Raises:
        ValueError: If an attribute is unknown, has the wrong type,
            or a required attribute is missing.
    """
    schema = ATTRIBUTE_SCHEMA[kind]

    for key, value in attributes.items():
        expected = schema.get(key)
        if expected is None:
            allowed = ", ".join(sorted(schema)) or "none"
            msg = f"Unknown attribute '{key}' for {kind.label} (allowed: {allowed})"
            raise ValueError(msg)

        if expected is list:
            ok = isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)
        elif expected is int:
            # bool is a subclass of int
            ok = isinstance(value, int) and not isinstance(value, bool)
        else:
            ok = isinstance(value, expected)

        if not ok:
            type_name = "list of strings" if expected is list else expected.__name__
            msg = f"Attribute '{key}' of {kind.label} must be a {type_name}"
            raise ValueError(msg)

    missing = REQUIRED_ATTRIBUTES[kind] - attributes.keys()
    if missing:
        msg = f"{kind.label} requires attribute(s): {', '.join(sorted(missing))}"
        raise ValueError(msg)


def _freeze_attributes(attributes: dict[str, Any] | None) -> tuple[tuple[str, Any], ...]:
    """Convert an attribute mapping into a sorted, hashable tuple."""
    if not attributes:
        return ()
    frozen: list[tuple[str, Any]] = []
    for key, value in attributes.items():
        if isinstance(value, list):
            value = tuple(value)
        frozen.append((key, value))
    return tuple(sorted(frozen))


@dataclass(frozen=True, slots=True)
class Package:
    """A package identified by its kind and name.

    Identity ``(kind, name)`` is the equality and hash key: attributes and
    the declaring manifest do not take part in comparisons, so a set of
    packages never holds the same identity twice.

    Attributes:
        kind: Package kind.
        name: Package name (case-sensitive, e.g. 'git', 'homebrew/cask-fonts').
        attributes: Sorted tuple of ``(key, value)`` attribute pairs.
        source: Path of the manifest that declared the package, if any.
    """

    kind: PackageKind
    name: str
    attributes: tuple[tuple[str, AttributeValue], ...] = field(default=(), compare=False)
    source: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate package data after initialization."""
        if not self.name or self.name != self.name.strip():
            msg = f"Invalid package name: {self.name!r}"
            raise ValueError(msg)
        if self.kind == PackageKind.TAP and self.name.count("/") != 1:
            msg = f"Tap name must have the form 'user/repo', got '{self.name}'"
            raise ValueError(msg)

    @classmethod
    def create(
        cls,
        kind: PackageKind,
        name: str,
        attributes: dict[str, Any] | None = None,
        source: str | None = None,
    ) -> Package:
        """Create a package from an attribute mapping, validating it.

        Args:
            kind: Package kind.
            name: Package name.
            attributes: Optional attribute mapping.
            source: Optional declaring manifest path.

        Returns:
            New Package instance.

        Raises:
            ValueError: If the name or attributes are invalid.
        """
        validate_attributes(kind, attributes or {})
        return cls(kind=kind, name=name, attributes=_freeze_attributes(attributes), source=source)

    @property
    def identity(self) -> Identity:
        """Identity key of the package."""
        return (self.kind, self.name)

    @property
    def attrs(self) -> dict[str, AttributeValue]:
        """Attributes as a dictionary."""
        return dict(self.attributes)

    @property
    def version(self) -> str | None:
        """Pinned version constraint, if declared."""
        value = self.attrs.get("version")
        return value if isinstance(value, str) else None

    @property
    def store_id(self) -> int | None:
        """App Store identifier (StoreApp packages only)."""
        value = self.attrs.get("id")
        return value if isinstance(value, int) and not isinstance(value, bool) else None

    @property
    def sort_key(self) -> tuple[int, str]:
        """Key for deterministic ordering by kind, then name."""
        return (KIND_ORDER.index(self.kind), self.name)

    def same_declaration(self, other: Package) -> bool:
        """Check whether two declarations have identical identity and attributes."""
        return self.identity == other.identity and self.attributes == other.attributes

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Returns:
            Dictionary representation of the package (without source).
        """
        result: dict[str, Any] = {
            "kind": self.kind.value,
            "name": self.name,
        }
        if self.attributes:
            result["attributes"] = {
                key: list(value) if isinstance(value, tuple) else value
                for key, value in self.attributes
            }
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Package:
        """Deserialize from dictionary.

        Args:
            data: Dictionary containing package data.

        Returns:
            Package instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If kind or attributes are invalid.
        """
        return cls.create(
            kind=PackageKind(data["kind"]),
            name=data["name"],
            attributes=data.get("attributes"),
        )

    def __str__(self) -> str:
        return f"{self.kind.label}:{self.name}"


def sort_packages(packages: Iterable[Package]) -> tuple[Package, ...]:
    """Return packages as a tuple sorted by kind and name."""
    return tuple(sorted(packages, key=lambda p: p.sort_key))
