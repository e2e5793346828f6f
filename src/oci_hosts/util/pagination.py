from __future__ import annotations

from typing import Callable, Generator, Sequence, Tuple, TypeVar

T = TypeVar("T")

PageFetcher = Callable[[str | None], Tuple[Sequence[T], str | None]]


def paginate(fetch: PageFetcher[T]) -> Generator[T, None, None]:
    """
    Generic paginator yielding items from a fetch(page_token) function.
    The fetch function must return (items, next_page_token). The first call
    receives None; if next_page_token is falsy, pagination stops.
    Errors raised by fetch propagate before any item of that page is yielded.
    """
    page: str | None = None
    while True:
        items, next_page = fetch(page)
        for it in items:
            yield it
        if not next_page:
            break
        page = next_page
