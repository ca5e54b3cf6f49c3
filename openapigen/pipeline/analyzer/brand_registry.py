"""
Brand registry for identifier-shaped properties.

Tracks which brand declarations a generation run has already produced so
that every brand name is declared exactly once.
"""

from __future__ import annotations

from ...utils import brand_name_for_id, is_id_field


class BrandRegistry:
    """Run-scoped mapping brand name -> emitted flag."""

    def __init__(self):
        self._brands: dict[str, bool] = {}

    def brand_for(self, key: str, parent_name: str) -> str | None:
        """Return the brand name for a property key, or None if the key is not identifier-shaped."""
        if not is_id_field(key):
            return None
        return brand_name_for_id(key, parent_name)

    def claim(self, brand_name: str) -> bool:
        """Mark a brand as emitted.

        Returns:
            True the first time a brand name is claimed, False afterwards
        """
        if self._brands.get(brand_name):
            return False
        self._brands[brand_name] = True
        return True

    def __contains__(self, brand_name: str) -> bool:
        return brand_name in self._brands

    def __len__(self) -> int:
        return len(self._brands)
