"""
Filter option building on top of the data access facade.

Raw rows from every record source are merged through coalesce(), which
deduplicates and sorts; the year list and the company list are both built
that way.
"""

from typing import Callable, Hashable, Iterable, List, Optional, TypeVar

from crackgrid.services.data_access import DataAccess
from crackgrid.services.types import CompanyOption

T = TypeVar("T")


def coalesce(
    values: Iterable[T],
    key: Optional[Callable[[T], Hashable]] = None,
    reverse: bool = False
) -> List[T]:
    """
    Deduplicate `values` by `key` and sort by the same key.

    The first value seen for each key is kept. Falsy keys are dropped.
    """
    key = key or (lambda v: v)

    unique = {}
    for value in values:
        k = key(value)
        if not k or k in unique:
            continue
        unique[k] = value

    return sorted(unique.values(), key=key, reverse=reverse)


def fallback_years(current_year: int, window: int = 5) -> List[str]:
    """Contiguous years ending at `current_year`, newest first."""
    return [str(current_year - i) for i in range(window)]


async def available_years(data_access: DataAccess) -> List[str]:
    """Year labels from every record source, newest first."""
    rows = await data_access.list_years()
    return coalesce((str(r.year) for r in rows), reverse=True)


async def available_companies(data_access: DataAccess, year: str) -> List[CompanyOption]:
    """Companies with any record in `year`, sorted by name."""
    company_ids = set(await data_access.list_company_ids_for_year(year))
    if not company_ids:
        return []

    pairs = await data_access.resolve_company_names(company_ids)

    # Lowest id wins when two ids share a name
    options = [CompanyOption(company_id=cid, name=name) for cid, name in sorted(pairs)]
    return coalesce(options, key=lambda o: o.name)


def find_company(options: Iterable[CompanyOption], name: str) -> Optional[CompanyOption]:
    """The option whose name matches `name`, ignoring case and surrounding spaces."""
    wanted = name.strip().lower()
    for option in options:
        if option.name.strip().lower() == wanted:
            return option
    return None
