import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Optional, Tuple

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import ClientDisconnect

from app.utils.helpers import strip_client_path

logger = logging.getLogger(__name__)

MULTIPART_FORM_DATA = "multipart/form-data"
DEFAULT_PART_TYPE = "application/octet-stream"
MAX_FIELD_BYTES = 1024 * 1024


class IngestionError(Exception):
    """The upload stream ended in an error: malformed, truncated or aborted"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


@dataclass
class ParsedPart:
    """The file part of an upload

    ``size`` counts every byte received; ``data`` keeps at most the
    reader's byte ceiling.
    """
    filename: str
    mime_type: str
    data: bytearray = field(default_factory=bytearray)
    size: int = 0

    def append(self, chunk: bytes, limit: Optional[int] = None):
        self.size += len(chunk)
        if limit is None:
            self.data.extend(chunk)
            return
        room = limit - len(self.data)
        if room > 0:
            self.data.extend(chunk[:room])

    @property
    def overflowed(self) -> bool:
        return self.size > len(self.data)


@dataclass
class ParsedForm:
    file: Optional[ParsedPart] = None
    keyword: str = "image"


def parse_multipart_content_type(content_type: Optional[str]) -> Optional[Tuple[bytes, str]]:
    """
    Extract the boundary and charset from a Content-Type header

    Args:
        content_type: Raw header value

    Returns:
        (boundary, charset) for multipart/form-data with a boundary, otherwise None
    """
    if not content_type:
        return None

    ctype, params = parse_options_header(content_type)
    if ctype.decode("latin-1") != MULTIPART_FORM_DATA:
        return None

    boundary = params.get(b"boundary")
    if not boundary:
        return None

    charset = params.get(b"charset", b"utf-8").decode("latin-1")
    return boundary, charset


class MultipartStreamReader:
    """Demultiplexes one multipart/form-data body into a file part and the keyword field

    Only the first part carrying a filename is kept. Bytes of that part
    beyond ``max_file_bytes`` are counted but not retained.
    """

    def __init__(
            self,
            boundary: bytes,
            charset: str = "utf-8",
            max_file_bytes: Optional[int] = None,
            keyword_field: str = "keyword",
            default_keyword: str = "image"
    ):
        self.boundary = boundary
        self.charset = charset
        self.max_file_bytes = max_file_bytes
        self.keyword_field = keyword_field
        self.default_keyword = default_keyword

        self._form = ParsedForm(keyword=default_keyword)
        self._headers: Dict[bytes, bytes] = {}
        self._header_field = b""
        self._header_value = b""
        self._part_kind: Optional[str] = None
        self._field_buffer = bytearray()
        self._closed = False

    def _callbacks(self):
        return {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
            "on_end": self.on_end,
        }

    def on_part_begin(self):
        self._headers = {}
        self._header_field = b""
        self._header_value = b""
        self._part_kind = None
        self._field_buffer = bytearray()

    def on_header_field(self, data: bytes, start: int, end: int):
        self._header_field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int):
        self._header_value += data[start:end]

    def on_header_end(self):
        self._headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def on_headers_finished(self):
        _, options = parse_options_header(self._headers.get(b"content-disposition"))
        name = options.get(b"name", b"").decode(self.charset, errors="replace")
        filename = options.get(b"filename")

        if filename is not None:
            if self._form.file is not None:
                logger.warning(f"Ignoring additional file part in field '{name}'")
                self._part_kind = "skip"
                return
            mime_type, _ = parse_options_header(self._headers.get(b"content-type"))
            self._form.file = ParsedPart(
                filename=strip_client_path(filename.decode(self.charset, errors="replace")),
                mime_type=mime_type.decode("latin-1") or DEFAULT_PART_TYPE
            )
            self._part_kind = "file"
            logger.info(f"File field received: {name}, filename: {self._form.file.filename}, "
                        f"MIME: {self._form.file.mime_type}")
        elif name == self.keyword_field:
            self._part_kind = "keyword"
        else:
            self._part_kind = "skip"

    def on_part_data(self, data: bytes, start: int, end: int):
        if self._part_kind == "file":
            self._form.file.append(data[start:end], self.max_file_bytes)
        elif self._part_kind == "keyword":
            self._field_buffer.extend(data[start:end])
            if len(self._field_buffer) > MAX_FIELD_BYTES:
                raise IngestionError(f"Field '{self.keyword_field}' exceeds {MAX_FIELD_BYTES} bytes")

    def on_part_end(self):
        if self._part_kind == "keyword":
            value = self._field_buffer.decode(self.charset, errors="replace").strip()
            self._form.keyword = value or self.default_keyword
            logger.info(f"Keyword field: {self._form.keyword}")
        elif self._part_kind == "file":
            logger.info(f"File received. Size: {self._form.file.size} bytes")
        self._part_kind = None

    def on_end(self):
        self._closed = True

    async def consume(self, stream: AsyncIterator[bytes]) -> ParsedForm:
        """
        Read the whole body and return the captured parts

        Args:
            stream: Async iterator over body chunks

        Returns:
            ParsedForm once the closing boundary has been seen

        Raises:
            IngestionError: malformed body, client disconnect, I/O failure
                or a body that ends before the closing boundary
        """
        parser = MultipartParser(self.boundary, self._callbacks())
        delimiter = b"--" + self.boundary
        # bytes before the first delimiter are preamble and are discarded
        preamble: Optional[bytearray] = bytearray()
        try:
            async for chunk in stream:
                if not chunk:
                    continue
                if preamble is not None:
                    preamble.extend(chunk)
                    index = preamble.find(delimiter)
                    if index < 0:
                        del preamble[:-(len(delimiter) - 1)]
                        continue
                    chunk = bytes(preamble[index:])
                    preamble = None
                parser.write(chunk)
            parser.finalize()
        except MultipartParseError as e:
            raise IngestionError(f"Malformed multipart body: {e}", e) from e
        except ClientDisconnect as e:
            raise IngestionError("Client disconnected before the upload completed", e) from e
        except OSError as e:
            raise IngestionError(f"Failed to read upload stream: {e}", e) from e

        if not self._closed:
            raise IngestionError("Upload stream ended before the multipart body was complete")

        return self._form
