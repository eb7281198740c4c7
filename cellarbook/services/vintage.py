"""Vintage stock model.

Pure functions over a wine's list of ``VintageEntry``. None of them mutate
their input; each returns a new list. The owning wine's stock level is the
``compute_total`` of its entries whenever vintage tracking applies.
"""

from collections.abc import Iterable
from datetime import date

from cellarbook.errors import InvalidVintageYear
from cellarbook.schemas.wine import VintageEntry, WineCategory

MIN_VINTAGE_YEAR = 1900
DEFAULT_MAX_STOCK_LEVEL = 9999

VINTAGE_APPLICABLE_CATEGORIES = frozenset(
    {WineCategory.RED, WineCategory.WHITE, WineCategory.ROSE}
)


def current_year() -> int:
    return date.today().year


def is_vintage_applicable(category: WineCategory | str | None) -> bool:
    """Check whether wines of ``category`` track stock per vintage."""
    if category is None:
        return False
    try:
        return WineCategory(category) in VINTAGE_APPLICABLE_CATEGORIES
    except ValueError:
        return False


def validate_vintage_year(
    year: int,
    *,
    minimum: int = MIN_VINTAGE_YEAR,
    maximum: int | None = None,
) -> int:
    """Return ``year`` unchanged or raise InvalidVintageYear.

    Args:
        year: Vintage year to check.
        minimum: Earliest accepted vintage.
        maximum: Latest accepted vintage; defaults to the current year.
    """
    if maximum is None:
        maximum = current_year()
    if year < minimum or year > maximum:
        raise InvalidVintageYear(year, minimum, maximum)
    return year


def clamp_stock(value: int, maximum: int = DEFAULT_MAX_STOCK_LEVEL) -> int:
    """Clamp a bottle count into [0, maximum]."""
    return min(max(value, 0), maximum)


def add_or_merge_vintage(
    entries: Iterable[VintageEntry],
    year: int,
    count: int = 1,
    *,
    minimum: int = MIN_VINTAGE_YEAR,
    maximum: int | None = None,
) -> list[VintageEntry]:
    """Add ``count`` bottles of ``year``.

    If the year is already present its stock is incremented, otherwise a
    new entry is appended. A negative count is treated as zero.

    Raises:
        InvalidVintageYear: If ``year`` is outside [minimum, maximum].
            Nothing is applied in that case.
    """
    validate_vintage_year(year, minimum=minimum, maximum=maximum)
    count = max(count, 0)

    result: list[VintageEntry] = []
    merged = False
    for entry in entries:
        if entry.vintage == year:
            entry = VintageEntry(vintage=year, stock=entry.stock + count)
            merged = True
        result.append(entry)

    if not merged and count > 0:
        result.append(VintageEntry(vintage=year, stock=count))
    return result


def set_vintage_stock(
    entries: Iterable[VintageEntry], year: int, new_count: int
) -> list[VintageEntry]:
    """Set the stock of ``year``, removing the entry when it drops to zero.

    The year is not re-validated; an existing entry is assumed valid.
    """
    if new_count <= 0:
        return remove_vintage(entries, year)

    result: list[VintageEntry] = []
    found = False
    for entry in entries:
        if entry.vintage == year:
            entry = VintageEntry(vintage=year, stock=new_count)
            found = True
        result.append(entry)

    if not found:
        result.append(VintageEntry(vintage=year, stock=new_count))
    return result


def remove_vintage(entries: Iterable[VintageEntry], year: int) -> list[VintageEntry]:
    """Drop the entry for ``year`` if there is one."""
    return [entry for entry in entries if entry.vintage != year]


def compute_total(entries: Iterable[VintageEntry]) -> int:
    """Sum the stock of every entry."""
    return sum(entry.stock for entry in entries)


def sorted_by_year(
    entries: Iterable[VintageEntry], descending: bool = False
) -> list[VintageEntry]:
    """Return entries ordered by vintage (stable)."""
    return sorted(entries, key=lambda entry: entry.vintage, reverse=descending)


def normalize_entries(
    entries: Iterable[VintageEntry],
    *,
    minimum: int = MIN_VINTAGE_YEAR,
    maximum: int | None = None,
) -> list[VintageEntry]:
    """Bring a client-supplied entry list into canonical form.

    Every year is validated before anything is built, negative stocks are
    clamped to zero, duplicate years are summed and empty vintages dropped.
    Entries keep the order in which their year first appeared.

    Raises:
        InvalidVintageYear: On the first out-of-range year.
    """
    entries = list(entries)
    for entry in entries:
        validate_vintage_year(entry.vintage, minimum=minimum, maximum=maximum)

    totals: dict[int, int] = {}
    for entry in entries:
        totals[entry.vintage] = totals.get(entry.vintage, 0) + max(entry.stock, 0)

    return [
        VintageEntry(vintage=year, stock=stock)
        for year, stock in totals.items()
        if stock > 0
    ]
