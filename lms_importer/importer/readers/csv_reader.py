"""
CSV reader turning uploaded text into RawRecords.
"""

import csv
import io
import itertools
import os
from pathlib import Path
from typing import Iterable, Iterator

from lms_importer.core.errors import EmptyInputError, FileTooLargeError, ImporterError, MissingColumnsError
from lms_importer.core.models import RawRecord
from lms_importer.observability.logger import get_logger
from lms_importer.utils.validation import validate_file_path


logger = get_logger(__name__)

DEFAULT_MAX_BYTES = 50 * 1024 * 1024


def _clean_header(name: str) -> str:
    return name.strip().replace('"', "")


class CSVReader:
    """
    Reads delimited text with a header row into RawRecords.

    Uses a quote-aware tokenizer, so quoted cells may contain the delimiter,
    doubled quotes and line breaks. Blank lines are skipped. A row shorter
    than the header is padded with empty cells; extra cells are dropped.
    """

    def __init__(self, delimiter: str = ",", max_bytes: int | None = None):
        """
        Initialize CSV reader.

        Args:
            delimiter: Field delimiter
            max_bytes: Upload size limit (defaults to env var IMPORT_MAX_BYTES or 50 MiB)
        """
        self.delimiter = delimiter
        self.max_bytes = max_bytes or int(os.getenv("IMPORT_MAX_BYTES", str(DEFAULT_MAX_BYTES)))

    def read(self, text: str, required_headers: Iterable[str] = ()) -> Iterator[RawRecord]:
        """
        Parse CSV text.

        The header and the presence of at least one data row are checked
        before this returns; rows themselves are produced lazily, one pass.

        Args:
            text: File content
            required_headers: Columns that must appear in the header row

        Returns:
            Iterator of RawRecord in file order

        Raises:
            EmptyInputError: If there is no header or no data row
            MissingColumnsError: If required columns are absent from the header
        """
        if not text or not text.strip():
            raise EmptyInputError()

        rows = self._tokenize(text)

        try:
            _, header_cells = next(rows)
        except StopIteration:
            raise EmptyInputError() from None

        headers = [_clean_header(cell) for cell in header_cells]
        missing = [name for name in required_headers if name not in headers]
        if missing:
            raise MissingColumnsError(missing)

        try:
            first = next(rows)
        except StopIteration:
            raise EmptyInputError() from None

        return self._records(headers, first, rows)

    def read_bytes(self, data: bytes, required_headers: Iterable[str] = (), max_bytes: int | None = None) -> Iterator[RawRecord]:
        """
        Parse uploaded bytes (UTF-8, optional BOM) after the size check.

        Raises:
            FileTooLargeError: If data exceeds the byte limit
            ImporterError: If the bytes are not valid UTF-8
        """
        limit = max_bytes or self.max_bytes
        if len(data) > limit:
            raise FileTooLargeError(len(data), limit)

        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImporterError(f"File is not valid UTF-8: {e}") from e

        return self.read(text, required_headers)

    def read_file(self, file_path: str | Path, required_headers: Iterable[str] = (), max_bytes: int | None = None) -> Iterator[RawRecord]:
        """
        Read a CSV file from disk, refusing oversized files before reading.

        Raises:
            InputValidationError: If the path is unsafe or not a .csv file
            FileTooLargeError: If the file exceeds the byte limit
        """
        path = Path(validate_file_path(str(file_path)))
        limit = max_bytes or self.max_bytes

        size = path.stat().st_size
        if size > limit:
            raise FileTooLargeError(size, limit)

        logger.info("Reading upload", extra={"file_path": str(path), "size_bytes": size})
        return self.read_bytes(path.read_bytes(), required_headers, max_bytes=limit)

    def _tokenize(self, text: str) -> Iterator[tuple[int, list[str]]]:
        """Yield (starting line number, cells) for each non-blank row."""
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self.delimiter, skipinitialspace=True)
        previous_line = 0
        try:
            for cells in reader:
                start_line = previous_line + 1
                previous_line = reader.line_num
                if not any(cell.strip() for cell in cells):
                    continue
                yield start_line, cells
        except csv.Error as e:
            raise ImporterError(f"CSV parsing error near line {reader.line_num}: {e}") from e

    def _records(
        self,
        headers: list[str],
        first: tuple[int, list[str]],
        rows: Iterator[tuple[int, list[str]]],
    ) -> Iterator[RawRecord]:
        row_number = 0
        for line, cells in itertools.chain([first], rows):
            row_number += 1
            values = {
                header: cells[idx] if idx < len(cells) else ""
                for idx, header in enumerate(headers)
            }
            yield RawRecord(row=row_number, line=line, values=values)
