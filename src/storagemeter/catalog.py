"""Category catalog for storagemeter."""

import os
from typing import Iterable, Iterator, Optional

from storagemeter.errors import ConfigurationError
from storagemeter.models import AppLayout, Category

TOTAL = "total"

# Plugin type directories inside the framework's src/
FRAMEWORK_PLUGIN_DIRS = ["components", "extensions", "menu", "theme"]


class CategoryCatalog:
    """
    Immutable mapping from category name to its paths.

    Containment is explicit: each category lists the categories it encloses.
    The total category encloses every other category unless it says otherwise.
    """

    def __init__(self, categories: Iterable[Category], total: Optional[str] = TOTAL):
        self._categories: dict[str, Category] = {}
        for category in categories:
            if category.name in self._categories:
                raise ConfigurationError(f"Duplicate category: {category.name}")
            for path in category.paths:
                if not path or not path.strip():
                    raise ConfigurationError(f"Category {category.name} has an empty path")
            self._categories[category.name] = category

        self._total = total if total in self._categories else None
        if self._total and not self._categories[self._total].encloses:
            others = tuple(n for n in self._categories if n != self._total)
            self._categories[self._total] = self._categories[self._total].model_copy(
                update={"encloses": others}
            )

        self._validate_containment()

    def _validate_containment(self) -> None:
        for category in self._categories.values():
            for child in category.encloses:
                if child == category.name:
                    raise ConfigurationError(f"Category {child} cannot enclose itself")
                if child not in self._categories:
                    raise ConfigurationError(
                        f"Category {category.name} encloses undefined category {child}"
                    )

        # Depth-first search for cycles
        visiting: set[str] = set()
        done: set[str] = set()

        def visit(name: str) -> None:
            if name in done:
                return
            if name in visiting:
                raise ConfigurationError(f"Containment cycle through category {name}")
            visiting.add(name)
            for child in self._categories[name].encloses:
                visit(child)
            visiting.discard(name)
            done.add(name)

        for name in self._categories:
            visit(name)

    def __iter__(self) -> Iterator[Category]:
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, name: object) -> bool:
        return name in self._categories

    @property
    def total_name(self) -> Optional[str]:
        """Name of the category that encloses all others, if there is one."""
        return self._total

    def names(self) -> set[str]:
        return set(self._categories)

    def get(self, name: str) -> Optional[Category]:
        return self._categories.get(name)

    def paths(self, name: str) -> list[str]:
        """Paths of a category, in configured order."""
        category = self._categories.get(name)
        if category is None:
            raise KeyError(name)
        return list(category.paths)

    def enclosed_by(self, name: str) -> list[str]:
        """Categories directly enclosed by the named one."""
        return list(self._categories[name].encloses)

    def top_level(self) -> list[str]:
        """
        Categories directly under total that no other enclosed category contains.

        These are the ones subtracted from total to derive system usage; a
        category nested in another is already counted by its parent.
        """
        if self._total is None:
            return []
        direct = self.enclosed_by(self._total)
        nested = {
            child
            for name in direct
            for child in self._descendants(name)
        }
        return [name for name in direct if name not in nested]

    def _descendants(self, name: str) -> set[str]:
        found: set[str] = set()
        stack = list(self._categories[name].encloses)
        while stack:
            child = stack.pop()
            if child not in found:
                found.add(child)
                stack.extend(self._categories[child].encloses)
        return found

    def overlapping_paths(self) -> list[tuple[str, str]]:
        """
        Pairs of categories with nested or identical paths that are not
        related by containment. Such pairs are double counted in system usage.
        """
        names = [n for n in self._categories if n != self._total]
        pairs = []
        for i, first in enumerate(names):
            for second in names[i + 1:]:
                if second in self._descendants(first) or first in self._descendants(second):
                    continue
                if _paths_overlap(self._categories[first].paths, self._categories[second].paths):
                    pairs.append((first, second))
        return pairs


def _paths_overlap(first: tuple[str, ...], second: tuple[str, ...]) -> bool:
    for a in first:
        for b in second:
            a_norm = os.path.normpath(a)
            b_norm = os.path.normpath(b)
            if a_norm == b_norm:
                return True
            if a_norm.startswith(b_norm.rstrip(os.sep) + os.sep):
                return True
            if b_norm.startswith(a_norm.rstrip(os.sep) + os.sep):
                return True
    return False


def catalog_from_layout(layout: AppLayout, root_dir: str) -> CategoryCatalog:
    """
    Build the standard assets/cache/plugins/total catalog from configured directories.

    Args:
        layout: Directories configured by other subsystems
        root_dir: Application root, enclosing everything else

    Returns:
        CategoryCatalog with the four standard categories
    """
    framework_src = os.path.join(layout.framework_dir, "src")
    return CategoryCatalog(
        [
            Category(name="assets", paths=[layout.upload_dir]),
            Category(name="cache", paths=[layout.upload_temp_dir, layout.build_dir]),
            Category(
                name="plugins",
                paths=[os.path.join(framework_src, d) for d in FRAMEWORK_PLUGIN_DIRS]
                + [layout.plugin_install_dir],
            ),
            Category(name=TOTAL, paths=[root_dir]),
        ]
    )
