from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from pricing_profiles.engine.catalog.models import Product

SCOPE_ONE = "one"
SCOPE_MULTIPLE = "multiple"
SCOPE_ALL = "all"
PRICING_SCOPES = (SCOPE_ONE, SCOPE_MULTIPLE, SCOPE_ALL)

ONE_PRODUCT_ONLY_MESSAGE = (
    "Only one product can be selected. Please change to 'Multiple Products' to select more."
)
SELECT_ALL_IN_ONE_SCOPE_MESSAGE = (
    "Cannot select all products when 'One Product' is selected. "
    "Please change to 'Multiple Products' to select all."
)


@dataclass(frozen=True)
class SelectionResult:
    success: bool
    error: Optional[str] = None


class ProductSelectionStore:
    """Selected products plus the pricing scope they were selected under.

    One store is created per editing session and passed to whoever needs it.
    Selection order is preserved so "keep the first product" is well defined.
    """

    def __init__(self, *, initial_scope: str = SCOPE_MULTIPLE, all_product_ids: Iterable[int] = ()) -> None:
        self._check_scope(initial_scope)
        self._scope = initial_scope
        self._all_product_ids: List[int] = list(dict.fromkeys(all_product_ids))
        self._selected: dict[int, None] = {}
        if self._scope == SCOPE_ALL:
            self._selected = dict.fromkeys(self._all_product_ids)

    @staticmethod
    def _check_scope(scope: str) -> None:
        if scope not in PRICING_SCOPES:
            raise ValueError(f"pricing scope must be one of {', '.join(PRICING_SCOPES)}")

    @property
    def scope(self) -> str:
        return self._scope

    @property
    def selected_ids(self) -> List[int]:
        return list(self._selected)

    @property
    def all_product_ids(self) -> List[int]:
        return list(self._all_product_ids)

    def is_selected(self, product_id: int) -> bool:
        return product_id in self._selected

    def toggle(self, product_id: int) -> SelectionResult:
        currently_selected = product_id in self._selected
        if self._scope == SCOPE_ONE and not currently_selected and self._selected:
            return SelectionResult(success=False, error=ONE_PRODUCT_ONLY_MESSAGE)
        if currently_selected:
            del self._selected[product_id]
            if self._scope == SCOPE_ALL:
                self._scope = SCOPE_MULTIPLE
        else:
            self._selected[product_id] = None
        return SelectionResult(success=True)

    def select_all(self, product_ids: Iterable[int]) -> None:
        if self._scope == SCOPE_ONE:
            return
        self._selected = dict.fromkeys(product_ids)

    def deselect_all(self) -> None:
        self._selected = {}

    def handle_select_all(self) -> SelectionResult:
        if self._scope == SCOPE_ONE:
            return SelectionResult(success=False, error=SELECT_ALL_IN_ONE_SCOPE_MESSAGE)
        self.select_all(self._all_product_ids)
        return SelectionResult(success=True)

    def handle_deselect_all(self) -> None:
        self.deselect_all()
        if self._scope == SCOPE_ALL:
            self._scope = SCOPE_MULTIPLE

    def set_scope(self, scope: str) -> None:
        self._check_scope(scope)
        if scope == SCOPE_ONE and len(self._selected) > 1:
            first = next(iter(self._selected))
            self._selected = {first: None}
        if scope == SCOPE_ALL and self._all_product_ids:
            self._selected = dict.fromkeys(self._all_product_ids)
        self._scope = scope

    def set_all_product_ids(self, product_ids: Iterable[int]) -> None:
        self._all_product_ids = list(dict.fromkeys(product_ids))
        if self._scope == SCOPE_ALL and self._all_product_ids:
            self._selected = dict.fromkeys(self._all_product_ids)

    def select_all_state(self) -> Optional[str]:
        if self._scope == SCOPE_ONE:
            return None
        if not self._selected:
            return "none"
        if self._all_product_ids and len(self._selected) == len(self._all_product_ids):
            return "all"
        return "partial"

    def selected_products(self, products: Iterable[Product]) -> List[Product]:
        return [product for product in products if product.id in self._selected]
