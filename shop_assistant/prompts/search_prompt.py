from __future__ import annotations

from typing import Sequence

from ..models import SearchResult


def format_search_results(results: Sequence[SearchResult]) -> str:
    return "\n\n".join(
        f"{index}. {result.title}\n   {result.snippet}\n   Link: {result.link}"
        for index, result in enumerate(results, start=1)
    )


def build_search_summary_instruction(results: Sequence[SearchResult]) -> str:
    """User-turn instruction that grounds the follow-up completion in search results."""
    return (
        f"Đây là kết quả tìm kiếm web:\n\n{format_search_results(results)}\n\n"
        "Hãy tóm tắt thông tin này một cách ngắn gọn và hữu ích cho người dùng. "
        "Trả lời bằng tiếng Việt."
    )
