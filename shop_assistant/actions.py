from __future__ import annotations

from enum import StrEnum


class ActionType(StrEnum):
    """UI directives the assistant may emit through action tags."""

    UNKNOWN = "UNKNOWN"

    VIEW_PRODUCT = "VIEW_PRODUCT"
    VIEW_CATEGORY = "VIEW_CATEGORY"
    GO_HOME = "GO_HOME"
    GO_CART = "GO_CART"
    WEB_SEARCH = "WEB_SEARCH"
    WEB_SEARCH_RESULTS = "WEB_SEARCH_RESULTS"

    @classmethod
    def decode(cls, kind: str | None) -> "ActionType":
        """Map a raw tag kind onto the closed vocabulary; unrecognized kinds fall through to UNKNOWN."""
        if not kind:
            return cls.UNKNOWN
        try:
            return cls(kind)
        except ValueError:
            return cls.UNKNOWN


# Kinds the model is allowed to emit. WEB_SEARCH_RESULTS is produced by the
# gateway itself and UNKNOWN is a decode fallthrough, so neither is advertised.
EMITTABLE_ACTIONS: tuple[ActionType, ...] = (
    ActionType.VIEW_PRODUCT,
    ActionType.VIEW_CATEGORY,
    ActionType.GO_HOME,
    ActionType.GO_CART,
    ActionType.WEB_SEARCH,
)


ACTION_DESCRIPTIONS: dict[str, str] = {
    ActionType.VIEW_PRODUCT.value: "Khi user muốn xem/mua sản phẩm",
    ActionType.VIEW_CATEGORY.value: "Khi user muốn xem danh mục",
    ActionType.GO_HOME.value: "Khi user muốn về trang chủ",
    ActionType.GO_CART.value: "Khi user muốn xem giỏ hàng",
    ActionType.WEB_SEARCH.value: (
        "Khi user hỏi về thông tin BÊN NGOÀI cửa hàng "
        "(tin tức crypto, giá ETH, thông tin blockchain mới nhất, etc.)"
    ),
}
