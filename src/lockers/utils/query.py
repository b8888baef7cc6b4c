"""Query helpers for listings that must not stop at the default page size."""

PAGE_SIZE = 100


def fetch_all(query, page_size: int = PAGE_SIZE) -> list:
    """Every record matching ``query``, read page by page."""
    items = []
    offset = 0
    while True:
        page = query.offset(offset).limit(page_size).all().items
        items.extend(page)
        if len(page) < page_size:
            return items
        offset += page_size
