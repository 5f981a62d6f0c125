from typing import Any, Iterable, List, Optional, Tuple, Union

from iwems.exceptions import ValidationError

SEARCH_FIELDS = ("name", "description", "location")

CapacityRange = Tuple[Optional[int], Optional[int]]


def _is_noop(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip().lower() in ("", "all"))


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def parse_capacity_range(value: Union[str, CapacityRange, None]) -> Optional[CapacityRange]:
    """
    Parses "min-max", "min" (no upper bound) or a (min, max) tuple.
    Returns None when the value does not restrict capacity.
    """
    if _is_noop(value):
        return None
    if isinstance(value, (tuple, list)):
        if len(value) != 2:
            raise ValidationError(f"Invalid capacity range: {value!r}")
        low, high = value
    else:
        low, _, high = str(value).strip().partition("-")
        try:
            low = int(low) if low.strip() else None
            high = int(high) if high.strip() else None
        except ValueError:
            raise ValidationError(f"Invalid capacity range: {value!r}") from None
    if low is not None and high is not None and low > high:
        raise ValidationError(f"Invalid capacity range: {value!r}")
    return low, high


def matches_search(item: Any, search_text: str) -> bool:
    needle = search_text.strip().lower()
    return any(needle in str(_field(item, name) or "").lower() for name in SEARCH_FIELDS)


def matches_capacity(item: Any, capacity_range: CapacityRange) -> bool:
    capacity = _field(item, "capacity")
    # No capacity value never satisfies a capacity filter.
    if capacity is None:
        return False
    low, high = capacity_range
    if low is not None and capacity < low:
        return False
    if high is not None and capacity > high:
        return False
    return True


def filter_directory(items: Iterable[Any], search_text: Optional[str] = None, category: Optional[str] = None,
                     price_range: Optional[str] = None,
                     capacity_range: Union[str, CapacityRange, None] = None) -> List[Any]:
    """
    Filters vendors or venues (models or dicts) without touching them.

    Search text matches name, description or location case-insensitively;
    each other dimension must match as well. Empty and "all" values are
    ignored. Input order is preserved.
    """
    capacity = parse_capacity_range(capacity_range)
    result = []
    for item in items:
        if not _is_noop(search_text) and not matches_search(item, search_text):
            continue
        if not _is_noop(category) and _field(item, "category") != category:
            continue
        if not _is_noop(price_range) and _field(item, "price_range") != price_range:
            continue
        if capacity is not None and not matches_capacity(item, capacity):
            continue
        result.append(item)
    return result
