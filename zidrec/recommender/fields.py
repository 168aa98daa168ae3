"""Field extractors for upstream Zid records.

Zid responses are not consistent about where a value lives: a line item may
carry ``product_id`` or ``productId``, a product may list categories as a
single ``category_id`` or as a ``categories`` list of objects or integers,
and so on. Each normalized field is described here as an ordered tuple of
extractor strategies. An extractor takes the raw record and returns a value
or ``None``; the first usable value wins. Supporting a new schema variant
means appending a strategy to the relevant tuple.
"""

from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

Record = Mapping[str, Any]
Extractor = Callable[[Record], Any]


def to_int(value: Any) -> Optional[int]:
    """Coerce an upstream identifier to ``int``.

    Returns ``None`` for booleans, missing values and anything that does not
    parse as an integer.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def key(name: str) -> Extractor:
    """Extractor returning ``record[name]`` or ``None``."""

    def extract(record: Record) -> Any:
        return record.get(name)

    extract.__name__ = f"key_{name}"
    return extract


def list_key(name: str) -> Extractor:
    """Extractor returning ``record[name]`` only when it is a list."""

    def extract(record: Record) -> Optional[list]:
        value = record.get(name)
        return value if isinstance(value, list) else None

    extract.__name__ = f"list_key_{name}"
    return extract


def first_of_list(name: str) -> Extractor:
    """Extractor returning the first element of the list ``record[name]``."""

    def extract(record: Record) -> Any:
        value = record.get(name)
        if isinstance(value, list) and value:
            first = value[0]
            if isinstance(first, Mapping):
                return first.get("url") or first.get("image_url")
            return first
        return None

    extract.__name__ = f"first_of_{name}"
    return extract


def _is_set(value: Any) -> bool:
    return value is not None


def _is_non_empty(value: Any) -> bool:
    return value is not None and value != ""


def first_value(
    record: Record,
    extractors: Sequence[Extractor],
    accept: Callable[[Any], bool] = _is_set,
) -> Any:
    """Run ``extractors`` in order and return the first accepted value."""
    for extractor in extractors:
        value = extractor(record)
        if accept(value):
            return value
    return None


# Order line items
LINE_ITEM_LIST_EXTRACTORS: Tuple[Extractor, ...] = (
    list_key("items"),
    list_key("order_items"),
)
LINE_ITEM_PRODUCT_ID_EXTRACTORS: Tuple[Extractor, ...] = (
    key("product_id"),
    key("productId"),
)

# Product attributes
TITLE_EXTRACTORS: Tuple[Extractor, ...] = (key("title"), key("name"))
IMAGE_EXTRACTORS: Tuple[Extractor, ...] = (
    key("main_image"),
    key("image"),
    first_of_list("images"),
)
PRICE_EXTRACTORS: Tuple[Extractor, ...] = (
    key("price"),
    key("price_after_discount"),
)


def _single_category(record: Record) -> List[int]:
    category_id = to_int(record.get("category_id"))
    return [category_id] if category_id is not None else []


def _category_list(record: Record) -> List[int]:
    categories = record.get("categories")
    if not isinstance(categories, list):
        return []

    ids = []
    for category in categories:
        if isinstance(category, Mapping):
            category_id = to_int(category.get("id"))
        elif isinstance(category, int) and not isinstance(category, bool):
            category_id = category
        else:
            category_id = None
        if category_id is not None:
            ids.append(category_id)
    return ids


# Categories are the union of every strategy, not the first match.
CATEGORY_EXTRACTORS: Tuple[Callable[[Record], List[int]], ...] = (
    _single_category,
    _category_list,
)


def extract_line_items(order: Record) -> list:
    """Return the raw line items of an order (empty if none are found)."""
    items = first_value(order, LINE_ITEM_LIST_EXTRACTORS)
    return items if items is not None else []


def extract_order_product_ids(order: Record) -> List[int]:
    """Return the distinct product ids of an order, in first-seen order."""
    seen = {}
    for item in extract_line_items(order):
        if not isinstance(item, Mapping):
            continue
        product_id = to_int(first_value(item, LINE_ITEM_PRODUCT_ID_EXTRACTORS))
        if product_id:
            seen.setdefault(product_id, None)
    return list(seen)


def extract_category_ids(product: Record) -> Tuple[int, ...]:
    """Return the deduplicated category ids of a product."""
    ids = {}
    for extractor in CATEGORY_EXTRACTORS:
        for category_id in extractor(product):
            ids.setdefault(category_id, None)
    return tuple(ids)


def extract_title(product: Record) -> str:
    title = first_value(product, TITLE_EXTRACTORS)
    return title if title is not None else ""


def extract_image(product: Record) -> str:
    image = first_value(product, IMAGE_EXTRACTORS, accept=_is_non_empty)
    return image if image is not None else ""


def extract_price(product: Record) -> Any:
    price = first_value(product, PRICE_EXTRACTORS)
    return price if price is not None else 0
