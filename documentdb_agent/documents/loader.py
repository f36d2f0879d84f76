"""Hotel data file loaders."""

import json
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from documentdb_agent.documents.models import Hotel
from documentdb_agent.exceptions import DocumentError, ErrorCode
from documentdb_agent.logging_config import get_logger

logger = get_logger(__name__)


class DocumentLoader(ABC):
    """Abstract base class for hotel data loaders."""

    @abstractmethod
    def load(self, source: str | Path) -> list[Hotel]:
        """Load hotels from a source.

        Args:
            source: Path or identifier for the data source.

        Returns:
            Loaded hotels, in source order.

        Raises:
            DocumentError: If loading fails.
        """
        ...


class HotelDataLoader(DocumentLoader):
    """Loader for the JSON hotel data file (a top-level array of hotels)."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def load(self, source: str | Path) -> list[Hotel]:
        """Load a JSON array of hotels.

        Raises:
            DocumentError: If the file is missing, not JSON, not an array,
                or an entry does not describe a hotel.
        """
        path = Path(source)

        if not path.exists():
            raise DocumentError(
                f"File not found: {path}",
                code=ErrorCode.DOCUMENT_NOT_FOUND,
                details={"path": str(path)},
            )

        if not path.is_file():
            raise DocumentError(
                f"Not a file: {path}",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(path)},
            )

        try:
            raw = json.loads(path.read_text(encoding=self.encoding))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DocumentError(
                f"Failed to parse JSON: {path}",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(path), "error": str(e)},
            ) from e
        except OSError as e:
            raise DocumentError(
                f"Failed to read file: {path}",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(path), "error": str(e)},
            ) from e

        if not isinstance(raw, list):
            raise DocumentError(
                f"Expected a JSON array of hotels: {path}",
                code=ErrorCode.DOCUMENT_PARSE_ERROR,
                details={"path": str(path), "type": type(raw).__name__},
            )

        hotels: list[Hotel] = []
        for index, entry in enumerate(raw):
            try:
                hotels.append(Hotel.model_validate(entry))
            except PydanticValidationError as e:
                raise DocumentError(
                    f"Invalid hotel entry at index {index}",
                    code=ErrorCode.DOCUMENT_PARSE_ERROR,
                    details={"path": str(path), "index": index, "error": str(e)},
                ) from e

        logger.info(f"Loaded {len(hotels)} hotels", extra={"path": str(path)})
        return hotels
