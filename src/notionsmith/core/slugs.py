"""Slug allocation for database entries."""

from __future__ import annotations

from slugify import slugify


class SlugAllocator:
    """Produce unique slugs, suffixing duplicates with ``-2``, ``-3``...

    An allocator holds the slugs handed out during one processing run. Create
    a new instance per run so repeated exports stay independent.
    """

    def __init__(self, *, separator: str = "-", fallback: str = "untitled") -> None:
        self.separator = separator
        self.fallback = fallback
        self._taken: set[str] = set()

    def __contains__(self, slug: object) -> bool:
        return slug in self._taken

    def __len__(self) -> int:
        return len(self._taken)

    def normalise(self, text: str) -> str:
        """Return the slug form of ``text`` without reserving it."""
        return slugify(text, separator=self.separator) or self.fallback

    def allocate(self, text: str) -> str:
        """Slugify ``text`` and reserve a unique variant of the result."""
        return self.reserve(self.normalise(text))

    def reserve(self, slug: str) -> str:
        """Reserve ``slug`` as is, or the first free numbered variant."""
        candidate = slug or self.fallback
        suffix = 2
        while candidate in self._taken:
            candidate = f"{slug}{self.separator}{suffix}"
            suffix += 1
        self._taken.add(candidate)
        return candidate


__all__ = ["SlugAllocator"]
