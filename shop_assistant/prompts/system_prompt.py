from __future__ import annotations

from typing import List

from ..actions import ACTION_DESCRIPTIONS, ActionType
from ..models import CatalogEntry, CatalogSnapshot, format_ether

STORE_NAME = "Dappazon"

CATEGORY_HEADERS: dict[str, str] = {
    "electronics": "📱 Electronics & Gadgets",
    "clothing": "👔 Clothing & Jewelry",
    "toys": "🎮 Toys & Gaming",
}

_STORE_INTRO = f"""Bạn là trợ lý AI thông minh cho {STORE_NAME} - một nền tảng thương mại điện tử phi tập trung (decentralized e-commerce) chạy trên blockchain Ethereum.

**Thông tin về {STORE_NAME}:**
- {STORE_NAME} là marketplace blockchain nơi người dùng mua sản phẩm bằng Ethereum (ETH)
- Tất cả giao dịch được ghi lại trên blockchain, đảm bảo minh bạch và bảo mật
- Người dùng cần ví MetaMask để kết nối và mua hàng
- Smart contract quản lý toàn bộ sản phẩm và đơn hàng"""

_PURCHASE_STEPS = """**Hướng dẫn mua hàng:**
1. Cài đặt MetaMask extension từ metamask.io
2. Tạo hoặc import ví Ethereum
3. Kết nối ví với {store} (nút "Connect")
4. Chọn sản phẩm muốn mua
5. Click "Buy Now" và xác nhận giao dịch trong MetaMask
6. Chờ blockchain xác nhận (vài giây)""".format(store=STORE_NAME)

_ROLE = """**Vai trò của bạn:**
- Trả lời câu hỏi về sản phẩm, giá cả, tồn kho{live_hint}
- Giải thích về blockchain, Ethereum, smart contracts
- Hướng dẫn cài đặt và sử dụng MetaMask
- Giúp người dùng hiểu cách mua hàng trên {store}
- Hỗ trợ cả tiếng Việt và tiếng Anh
- Giữ câu trả lời ngắn gọn, thân thiện, dễ hiểu"""

_FALLBACK_ROLE = _ROLE.format(live_hint="", store=STORE_NAME)

# Served when the ledger cannot be read. It deliberately carries no action
# grammar: ids below are illustrative and may not exist on chain.
FALLBACK_SYSTEM_PROMPT = f"""{_STORE_INTRO}

**Danh mục sản phẩm:**

📱 Electronics & Gadgets:
- Camera (1 ETH) - Đánh giá 4⭐, còn 10 sản phẩm
- Drone (2 ETH) - Đánh giá 5⭐, còn 6 sản phẩm
- Headset (0.25 ETH) - Đánh giá 2⭐, còn 24 sản phẩm

👔 Clothing & Jewelry:
- Shoes (0.25 ETH) - Đánh giá 5⭐, còn 3 sản phẩm
- Sunglasses (0.10 ETH) - Đánh giá 4⭐, còn 12 sản phẩm
- Watch (1.25 ETH) - Đánh giá 4⭐, HẾT HÀNG

🎮 Toys & Gaming:
- Puzzle Cube (0.05 ETH) - Đánh giá 4⭐, còn 15 sản phẩm
- Train Set (0.20 ETH) - Đánh giá 4⭐, HẾT HÀNG
- Robot Set (0.15 ETH) - Đánh giá 3⭐, còn 12 sản phẩm

{_FALLBACK_ROLE}

Hãy trả lời một cách tự nhiên, hữu ích và chuyên nghiệp!"""


def category_header(category: str) -> str:
    return CATEGORY_HEADERS.get(category, f"🛍️ {category.replace('_', ' ').title()}")


def stock_text(entry: CatalogEntry) -> str:
    if entry.stock == 0:
        return "HẾT HÀNG"
    return f"còn {entry.stock} sản phẩm"


def render_entry(entry: CatalogEntry) -> str:
    stars = "⭐" * entry.rating
    return (
        f"- {entry.name} ({format_ether(entry.price_ether)} ETH) - "
        f"Đánh giá {stars}, {stock_text(entry)}"
    )


def render_catalog(snapshot: CatalogSnapshot) -> str:
    sections: List[str] = []
    for category, entries in snapshot.categories.items():
        lines = [render_entry(entry) for entry in entries] or ["- (chưa có sản phẩm)"]
        sections.append(f"{category_header(category)}:\n" + "\n".join(lines))
    return "\n\n".join(sections)


def tag(kind: ActionType, payload: str | None = None) -> str:
    if payload is None:
        return f"[ACTION:{kind.value}]"
    return f"[ACTION:{kind.value}:{payload}]"


def render_action_grammar(snapshot: CatalogSnapshot) -> str:
    """Describe the tag syntax, live product ids and one example per kind."""

    entries = list(snapshot.entries())
    id_list = ", ".join(f"{entry.name} = {entry.id}" for entry in entries) or "(chưa có sản phẩm)"
    categories = [name for name, bucket in snapshot.categories.items() if bucket] or list(
        snapshot.categories
    )
    category_choices = "/".join(categories)

    sample = entries[0] if entries else None
    sample_name = sample.name if sample else "Camera"
    sample_id = str(sample.id) if sample else "1"
    sample_price = format_ether(sample.price_ether) if sample else "1"
    sample_category = categories[0] if categories else "electronics"

    kinds = [
        (ActionType.VIEW_PRODUCT, "id", tag(ActionType.VIEW_PRODUCT, sample_id)),
        (ActionType.VIEW_CATEGORY, "category", tag(ActionType.VIEW_CATEGORY, sample_category)),
        (ActionType.GO_HOME, None, tag(ActionType.GO_HOME)),
        (ActionType.GO_CART, None, tag(ActionType.GO_CART)),
        (ActionType.WEB_SEARCH, "query", tag(ActionType.WEB_SEARCH, "giá ethereum hôm nay")),
    ]
    kind_lines = []
    for kind, placeholder, example in kinds:
        syntax = f"[ACTION:{kind.value}:{placeholder}]" if placeholder else f"[ACTION:{kind.value}]"
        description = ACTION_DESCRIPTIONS[kind.value]
        if kind is ActionType.VIEW_CATEGORY:
            description = f"{description} ({category_choices})"
        kind_lines.append(f"- {syntax} - {description}. Ví dụ: {example}")

    examples = [
        f'- User: "Cho xem {sample_name}" → "Đây là {sample_name} với giá {sample_price} ETH! '
        f'{tag(ActionType.VIEW_PRODUCT, sample_id)}"',
        f'- User: "Sản phẩm {sample_category}" → "Đây là các sản phẩm trong danh mục {sample_category}! '
        f'{tag(ActionType.VIEW_CATEGORY, sample_category)}"',
        f'- User: "Về trang chủ" → "Mình đưa bạn về trang chủ nhé! {tag(ActionType.GO_HOME)}"',
        f'- User: "Xem giỏ hàng" → "Đây là giỏ hàng của bạn! {tag(ActionType.GO_CART)}"',
        '- User: "Giá ETH hôm nay" → "Để tôi tìm kiếm giá ETH mới nhất cho bạn... '
        f'{tag(ActionType.WEB_SEARCH, "giá ethereum hôm nay")}"',
    ]

    return "\n".join(
        [
            "**QUAN TRỌNG - ACTIONS:**",
            "Khi người dùng muốn thực hiện thao tác, thêm action tag vào cuối response.",
            "Cú pháp: [ACTION:LOẠI] hoặc [ACTION:LOẠI:giá_trị]. Chỉ dùng các loại dưới đây.",
            "",
            "Danh sách sản phẩm và ID:",
            f"- {id_list}",
            "",
            "Các action có thể dùng:",
            *kind_lines,
            "",
            "Ví dụ responses:",
            *examples,
            "",
            "QUAN TRỌNG VỀ WEB SEARCH:",
            f"- Chỉ dùng WEB_SEARCH khi user hỏi thông tin NGOÀI {STORE_NAME}",
            f"- Các câu hỏi về sản phẩm {STORE_NAME} → trả lời từ dữ liệu blockchain ở trên",
            "- Các câu hỏi về giá crypto, tin tức, thông tin bên ngoài → dùng WEB_SEARCH",
        ]
    )


def build_system_prompt(snapshot: CatalogSnapshot) -> str:
    """Render the live system prompt for a verified catalog snapshot."""

    return "\n\n".join(
        [
            _STORE_INTRO,
            "**Danh mục sản phẩm (DỮ LIỆU THỜI GIAN THỰC TỪ BLOCKCHAIN):**",
            render_catalog(snapshot),
            _PURCHASE_STEPS,
            _ROLE.format(live_hint=" (SỬ DỤNG DỮ LIỆU THỜI GIAN THỰC Ở TRÊN)", store=STORE_NAME),
            render_action_grammar(snapshot),
            "Hãy trả lời một cách tự nhiên, hữu ích và chuyên nghiệp! "
            "Luôn thêm action khi phù hợp để giúp user dễ dàng tương tác.",
        ]
    )
