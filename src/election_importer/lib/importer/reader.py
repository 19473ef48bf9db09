"""Delimited text reading over uploaded byte streams.

Detects the stream encoding (UTF-8 with optional BOM, falling back to
Latin-1), wraps the stream in a text decoder, and yields raw field lists
with their source line numbers so importers can report line-level errors.
"""

import codecs
import csv
import io
from collections.abc import Iterator
from typing import BinaryIO, TextIO

from loguru import logger

from election_importer.lib.importer.errors import ImportAbortedError

_SAMPLE_SIZE = 8192

_CANDIDATE_ENCODINGS = ("utf-8-sig", "latin-1")


def _sample(stream: BinaryIO) -> bytes:
    """Read up to ``_SAMPLE_SIZE`` bytes without consuming the stream."""
    if stream.seekable():
        position = stream.tell()
        sample = stream.read(_SAMPLE_SIZE)
        stream.seek(position)
        return sample
    peek = getattr(stream, "peek", None)
    if peek is not None:
        return peek(_SAMPLE_SIZE)[:_SAMPLE_SIZE]
    return b""


def detect_encoding(stream: BinaryIO) -> str:
    """Detect the stream encoding by decoding a leading sample.

    Args:
        stream: Readable binary stream positioned at the start of the data.

    Returns:
        The detected encoding string.

    Raises:
        ValueError: If no candidate encoding decodes the sample.
    """
    sample = _sample(stream)
    for encoding in _CANDIDATE_ENCODINGS:
        decoder = codecs.getincrementaldecoder(encoding)()
        try:
            # final=False tolerates a multi-byte sequence cut by the sample boundary
            decoder.decode(sample, final=False)
        except UnicodeDecodeError:
            continue
        return encoding
    msg = "Cannot detect encoding of uploaded file"
    raise ValueError(msg)


def open_text_stream(stream: BinaryIO) -> TextIO:
    """Wrap a binary upload stream in a text decoder suitable for ``csv``.

    Closing the returned wrapper closes the underlying stream.

    Args:
        stream: Readable binary stream.

    Returns:
        A text stream with universal newlines disabled, as ``csv`` expects.

    Raises:
        ImportAbortedError: If the stream is not readable.
    """
    try:
        if not stream.readable():
            msg = "Could not open file: stream is not readable"
            raise ImportAbortedError(msg)
        encoding = detect_encoding(stream)
    except (OSError, ValueError) as exc:
        msg = f"Could not open file: {exc}"
        raise ImportAbortedError(msg) from exc

    logger.debug(f"Reading upload with encoding={encoding}")
    return io.TextIOWrapper(stream, encoding=encoding, newline="")  # type: ignore[arg-type]


def iter_rows(
    text: TextIO,
    *,
    delimiter: str = ",",
    skip_header: bool = False,
    quoting: int = csv.QUOTE_MINIMAL,
) -> Iterator[tuple[int, list[str]]]:
    """Iterate delimited records with their starting line numbers.

    Blank lines are skipped without being reported.

    Args:
        text: Text stream from :func:`open_text_stream`.
        delimiter: Field delimiter.
        skip_header: Discard the first non-blank record.
        quoting: ``csv`` quoting mode; pipe-delimited state extracts use
            ``csv.QUOTE_NONE`` because quote characters are literal there.

    Yields:
        Tuples of (1-based line number, list of raw field strings).

    Raises:
        ImportAbortedError: If the file cannot be decoded or tokenized.
    """
    reader = csv.reader(text, delimiter=delimiter, quoting=quoting)
    header_pending = skip_header
    line = 1
    try:
        for fields in reader:
            start_line = line
            line = reader.line_num + 1
            if not fields:
                continue
            if header_pending:
                header_pending = False
                continue
            yield start_line, fields
    except (csv.Error, UnicodeDecodeError) as exc:
        msg = f"Could not read file near line {reader.line_num}: {exc}"
        raise ImportAbortedError(msg) from exc
