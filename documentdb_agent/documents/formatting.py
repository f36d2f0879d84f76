"""Plain-text rendering of search hits for the synthesizer.

Each hit becomes one block of ``Field: value`` lines in a fixed order,
wrapped in start/end markers. Blocks are joined by a blank line.
"""

from documentdb_agent.documents.models import Hotel

RECORD_START = "--- RECORD START ---"
RECORD_END = "--- RECORD END ---"
BLOCK_SEPARATOR = "\n\n"


def _bool(value: bool) -> str:
    return "true" if value else "false"


def format_hotel_block(hotel: Hotel, score: float) -> str:
    """Render one hotel and its similarity score."""
    renovated = (
        hotel.last_renovation_date.strftime("%Y-%m-%d")
        if hotel.last_renovation_date
        else ""
    )
    rating = "" if hotel.rating is None else f"{hotel.rating:.1f}"
    address = hotel.address

    fields = [
        ("HotelId", hotel.hotel_id),
        ("HotelName", hotel.hotel_name),
        ("Description", hotel.description),
        ("Category", hotel.category),
        ("Tags", ", ".join(hotel.tags)),
        ("ParkingIncluded", _bool(hotel.parking_included)),
        ("IsDeleted", _bool(hotel.is_deleted)),
        ("LastRenovationDate", renovated),
        ("Rating", rating),
        ("Address.StreetAddress", address.street_address),
        ("Address.City", address.city),
        ("Address.StateProvince", address.state_province),
        ("Address.PostalCode", address.postal_code),
        ("Address.Country", address.country),
        ("Score", f"{score:.6f}"),
    ]

    lines = [RECORD_START]
    lines.extend(f"{name}: {value}" for name, value in fields)
    lines.append(RECORD_END)
    return "\n".join(lines)


def join_blocks(blocks: list[str]) -> str:
    return BLOCK_SEPARATOR.join(blocks)


def split_blocks(text: str) -> list[str]:
    """Extract the marker-delimited blocks from a tool output, in order.

    Text outside the markers is dropped. Returns an empty list when the text
    holds no complete block.
    """
    blocks: list[str] = []
    position = 0

    while True:
        start = text.find(RECORD_START, position)
        if start == -1:
            break
        end = text.find(RECORD_END, start)
        if end == -1:
            break
        end += len(RECORD_END)
        blocks.append(text[start:end])
        position = end

    return blocks


def top_blocks(text: str, limit: int) -> str:
    """Keep only the first ``limit`` blocks of a tool output.

    Text without any block (an error message, say) is returned unchanged.
    """
    blocks = split_blocks(text)
    if not blocks:
        return text
    return join_blocks(blocks[:limit])
