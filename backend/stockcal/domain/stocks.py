"""Ticker/name search ranking for the stock picker."""

from typing import Iterable, List, TypeVar

SEARCH_RESULT_LIMIT = 10

T = TypeVar("T")


def search_rank(ticker: str, name: str, query: str) -> int:
    """
    Rank a stock for a query, lower is better.

    0 exact ticker, 1 ticker prefix, 2 ticker contains, 3 name prefix,
    4 name contains, -1 no match.
    """
    q = query.strip().lower()
    t = ticker.lower()
    n = (name or "").lower()
    if t == q:
        return 0
    if t.startswith(q):
        return 1
    if q in t:
        return 2
    if n.startswith(q):
        return 3
    if q in n:
        return 4
    return -1


def rank_stocks(stocks: Iterable[T], query: str, limit: int = SEARCH_RESULT_LIMIT) -> List[T]:
    """Order matching stocks by search_rank, then alphabetically by ticker."""
    if not query.strip():
        return []
    scored = []
    for stock in stocks:
        rank = search_rank(stock.ticker, stock.name, query)
        if rank >= 0:
            scored.append((rank, stock.ticker, stock))
    scored.sort(key=lambda item: (item[0], item[1]))
    return [stock for _, _, stock in scored[:limit]]
