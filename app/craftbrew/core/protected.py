"""Protected package identities.

Protected packages are never removed, whatever the manifests say. The
engine always protects the core Homebrew taps and the tools it depends
on; users can add their own identities in config.toml.
"""

from collections.abc import Iterable

from craftbrew.models.package import Identity, Package, PackageKind

# Always protected, regardless of configuration
ENGINE_PROTECTED: frozenset[Identity] = frozenset(
    {
        (PackageKind.TAP, "homebrew/core"),
        (PackageKind.TAP, "homebrew/cask"),
        (PackageKind.TAP, "homebrew/bundle"),
        (PackageKind.FORMULA, "mas"),
    }
)


def parse_identity(text: str) -> Identity:
    """Parse 'kind:name' notation into an identity.

    The kind may be given as its value ('formula', 'store_app') or its
    manifest keyword ('brew', 'mas').

    Args:
        text: Identity string such as 'formula:git' or 'cask:firefox'.

    Returns:
        Identity tuple.

    Raises:
        ValueError: If the notation or kind is invalid.
    """
    kind_text, sep, name = text.strip().partition(":")
    if not sep or not name:
        msg = f"Invalid identity '{text}' (expected 'kind:name')"
        raise ValueError(msg)
    try:
        kind = PackageKind(kind_text)
    except ValueError:
        kind = PackageKind.from_keyword(kind_text)
    return (kind, name)


class ProtectedSet:
    """Set of identities that may never be removed.

    Matching is exact on (kind, name): protecting 'formula:git' does not
    protect a cask named 'git'.
    """

    def __init__(self, identities: Iterable[Identity] = (), include_engine: bool = True) -> None:
        base = set(ENGINE_PROTECTED) if include_engine else set()
        self._identities: frozenset[Identity] = frozenset(base | set(identities))

    @classmethod
    def from_strings(cls, entries: Iterable[str]) -> "ProtectedSet":
        """Build a protected set from 'kind:name' strings plus the engine defaults."""
        return cls(parse_identity(entry) for entry in entries)

    @property
    def identities(self) -> frozenset[Identity]:
        return self._identities

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Package):
            return item.identity in self._identities
        return item in self._identities

    def __len__(self) -> int:
        return len(self._identities)

    def partition(
        self, packages: Iterable[Package]
    ) -> tuple[frozenset[Package], frozenset[Package]]:
        """Split packages into (removable, protected)."""
        removable: set[Package] = set()
        protected: set[Package] = set()
        for pkg in packages:
            (protected if pkg in self else removable).add(pkg)
        return frozenset(removable), frozenset(protected)

    def union(self, identities: Iterable[Identity]) -> "ProtectedSet":
        """Return a new set that also protects ``identities``."""
        return ProtectedSet(self._identities | set(identities), include_engine=False)
