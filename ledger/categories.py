"""Category registry: the id -> display metadata mapping records point at."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from .exceptions import DuplicateError, NotFoundError, ValidationError
from .models import Category
from .validators import MAX_NAME_LENGTH, normalize_category_id, validate_required_str

DEFAULT_COLOR = "#10b981"
FALLBACK_CATEGORY_ID = "other"

_UNSET = object()

DEFAULT_CATEGORIES = (
    Category(id="food", name="Food & Drinks", color="#6366f1"),
    Category(id="transport", name="Transport", color="#10b981"),
    Category(id="bill", name="Bills", color="#f59e0b"),
    Category(id="shopping", name="Shopping", color="#ef4444"),
    Category(id="health", name="Health", color="#22c55e"),
    Category(id="entertain", name="Entertainment", color="#06b6d4"),
    Category(id=FALLBACK_CATEGORY_ID, name="Other", color="#8b5cf6"),
)


class CategoryRegistry:
    """Owns category definitions in enumeration (insertion) order.

    Removing a category never touches expense records; records that still
    reference it simply become orphaned and display their raw id.
    """

    def __init__(
        self,
        categories: Optional[Iterable[Category]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        seed = DEFAULT_CATEGORIES if categories is None else categories
        self._categories: Dict[str, Category] = {}
        for category in seed:
            if category.id in self._categories:
                raise DuplicateError(f"Category {category.id} is defined twice")
            self._categories[category.id] = category
        self._on_change = on_change

    # Public API -----------------------------------------------------------
    def add(self, name: object, color: Optional[str] = None) -> Category:
        clean_name = validate_required_str(name, "name", MAX_NAME_LENGTH)
        category_id = normalize_category_id(clean_name)
        if category_id in self._categories:
            raise DuplicateError(f"Category {category_id} already exists")
        category = Category(id=category_id, name=clean_name, color=_clean_color(color))
        self._categories[category_id] = category
        self._changed()
        return category

    def update(self, category_id: str, *, name: object = _UNSET, color: object = _UNSET) -> Category:
        """Apply a name and/or color change as one mutation.

        Every given field is validated before anything is stored, so a bad
        color never leaves a half-applied rename behind.
        """
        existing = self._get_or_raise(category_id)
        clean_name = existing.name
        clean_color = existing.color
        if name is not _UNSET:
            clean_name = validate_required_str(name, "name", MAX_NAME_LENGTH)
        if color is not _UNSET:
            if not isinstance(color, str) or not color.strip():
                raise ValidationError("color", "cannot be empty")
            clean_color = color.strip()
        if name is _UNSET and color is _UNSET:
            return existing
        return self._replace(Category(id=existing.id, name=clean_name, color=clean_color))

    def rename(self, category_id: str, name: object) -> Category:
        return self.update(category_id, name=name)

    def recolor(self, category_id: str, color: object) -> Category:
        return self.update(category_id, color=color)

    def remove(self, category_id: str) -> None:
        if self._categories.pop(category_id, None) is not None:
            self._changed()

    def get(self, category_id: str) -> Category:
        return self._get_or_raise(category_id)

    def list(self) -> List[Category]:
        return list(self._categories.values())

    def display_name(self, category_id: str) -> str:
        category = self._categories.get(category_id)
        return category.name if category else category_id

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._categories

    def __len__(self) -> int:
        return len(self._categories)

    # Internal helpers -----------------------------------------------------
    def _replace(self, category: Category) -> Category:
        # Assigning an existing key keeps its enumeration position.
        self._categories[category.id] = category
        self._changed()
        return category

    def _get_or_raise(self, category_id: str) -> Category:
        try:
            return self._categories[category_id]
        except KeyError as exc:
            raise NotFoundError(f"Category {category_id} not found") from exc

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()


def _clean_color(color: Optional[str]) -> str:
    if color is None or not str(color).strip():
        return DEFAULT_COLOR
    return str(color).strip()
