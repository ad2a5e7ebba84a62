"""Simple CLI entry point for browsing a listing catalog."""

import asyncio
import logging
import sys

from listing_browse import SCHEMAS, BrowseSession, InMemoryListingStore
from listing_browse.schema import NAVIGATION_FIELDS
from listing_browse.config import CATALOG_PATH, LOG_LEVEL
from listing_browse.models import BrowseView
from listing_browse.session import load_select_options
from listing_browse.utils import to_number

HELP = (
    "Type a query string (e.g. q=rolex&minPrice=1000&sort=priceAsc) to filter,\n"
    "'more' to load more, 'clear' to reset filters, 'exit' or 'quit' to stop."
)


def print_view(view: BrowseView) -> None:
    total = view.total_count if view.total_count is not None else "?"
    print(f"{view.url}  ({view.matched_count} matched / {view.loaded_count} loaded / {total} total)")
    for record in view.records:
        price = to_number(record.price)
        price_text = f"{price:,.0f} TL" if price is not None else "—"
        print(f"  {record.id:<12} {price_text:>14}  {record.get('title') or ''}")
    if view.error:
        print(f"  ! {view.error} (type 'more' to retry)")
    elif view.has_more:
        print("  ... more available")


async def main(variant: str, slug: str) -> None:
    schema = SCHEMAS[variant]
    store = InMemoryListingStore.from_json(CATALOG_PATH)
    session = BrowseSession(store, schema=schema)
    path = f"/{slug}"
    field = NAVIGATION_FIELDS[variant]
    options = await load_select_options(store, variant, slug)

    print_view(await session.navigate(path, {field: slug}, select_options=options))
    print(HELP)

    while True:
        try:
            user_input = input("> ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting.")
            break

        if not user_input:
            continue
        if user_input.lower() in {"exit", "quit"}:
            print("Goodbye.")
            break

        if user_input.lower() == "more":
            view = await session.load_more()
        elif user_input.lower() == "clear":
            view = await session.clear_filters()
        else:
            # A fresh session re-hydrates from the typed query string.
            session = BrowseSession(store, schema=schema)
            view = await session.navigate(path, {field: slug}, user_input, select_options=options)
        print_view(view)

    print("Session ended.")


if __name__ == "__main__":
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if len(sys.argv) != 3 or sys.argv[1] not in SCHEMAS:
        print(f"usage: python main.py {{{'|'.join(SCHEMAS)}}} <id>")
        sys.exit(2)
    asyncio.run(main(sys.argv[1], sys.argv[2]))
