"""
Synonym table for ingredient names.

Groups are declared in match_config.json as canonical term -> variants.
Every member is normalized when the table is built, so the JSON can keep
the natural spelling ("brânză tare") while lookups use normalized names.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from .normalizer import normalize


class SynonymTable:
    """
    Read-only lookup from any group member to the whole group.

    Attributes:
        groups: canonical term -> ordered tuple of normalized members
    """

    def __init__(self, groups: Mapping[str, Sequence[str]]):
        built: dict[str, tuple[str, ...]] = {}
        lookup: dict[str, str] = {}

        for canonical, variants in groups.items():
            key = normalize(canonical)
            if not key:
                raise ValueError(f"Synonym group name normalizes to nothing: {canonical!r}")

            # Canonical term is always a member of its own group
            members = list(dict.fromkeys(
                m for m in (normalize(v) for v in [canonical, *variants]) if m
            ))

            for member in members:
                owner = lookup.get(member)
                if owner is not None and owner != key:
                    raise ValueError(
                        f"Synonym {member!r} appears in both {owner!r} and {key!r} groups"
                    )
                lookup[member] = key

            built[key] = tuple(members)

        self._groups = MappingProxyType(built)
        self._lookup = MappingProxyType(lookup)

    @property
    def groups(self) -> Mapping[str, tuple[str, ...]]:
        return self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, name: str) -> bool:
        return name in self._lookup

    def canonical(self, normalized_name: str) -> Optional[str]:
        """Canonical term of the group containing the name, if any."""
        return self._lookup.get(normalized_name)

    def synonyms_of(self, normalized_name: str) -> frozenset[str]:
        """
        All names considered equivalent to the given one.

        A name outside every group is only a synonym of itself.
        """
        key = self._lookup.get(normalized_name)
        if key is None:
            return frozenset((normalized_name,))
        return frozenset(self._groups[key])


def synonyms_of(normalized_name: str, table: Optional[SynonymTable] = None) -> frozenset[str]:
    """Look up a normalized name in the given table, or the shipped default table."""
    if table is None:
        from .config import default_config
        table = default_config().synonyms
    return table.synonyms_of(normalized_name)
