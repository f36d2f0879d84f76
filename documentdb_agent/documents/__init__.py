"""Hotel data models, loading and formatting."""

from documentdb_agent.documents.formatting import (
    RECORD_END,
    RECORD_START,
    format_hotel_block,
    join_blocks,
    split_blocks,
    top_blocks,
)
from documentdb_agent.documents.loader import DocumentLoader, HotelDataLoader
from documentdb_agent.documents.models import Address, Hotel

__all__ = [
    "RECORD_END",
    "RECORD_START",
    "Address",
    "DocumentLoader",
    "Hotel",
    "HotelDataLoader",
    "format_hotel_block",
    "join_blocks",
    "split_blocks",
    "top_blocks",
]
