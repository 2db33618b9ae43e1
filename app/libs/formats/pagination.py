import math
from typing import Any


def paginate(items: list[Any], page: int, size: int, total: int) -> dict:
    total_pages = math.ceil(total / size) if size else 0
    return {
        "page": page,
        "size": size,
        "total_items": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_previous": page > 1,
        "items": items,
    }
