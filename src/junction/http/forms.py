"""Form body parsing, URL-encoded and multipart.

URL-encoded bodies use stdlib ``urllib.parse``.  Multipart bodies are
parsed with ``python-multipart``; file parts are kept apart from scalar
fields in ``FormData.files`` so that lookups by key only ever see scalars.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

from python_multipart.multipart import MultipartParser, parse_options_header

from junction._internal.multimap import MultiValueMap


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file from a multipart form submission.

    Held in memory as bytes.  Never a source for ``bind()``; read uploads
    through ``request.form.files``.
    """

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(MultiValueMap):
    """Immutable parsed form body.

    Scalar fields are the mapping; uploads live apart in ``files`` so
    that ``has``/``read`` (and therefore ``bind()``) never see them::

        form = request.form
        title = form["title"]
        attachment = form.files.get("attachment")  # UploadFile or None
    """

    __slots__ = ("_files",)

    def __init__(
        self,
        data: dict[str, list[str]] | None = None,
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        super().__init__(data)
        self._files: dict[str, UploadFile] = files or {}

    @property
    def files(self) -> Mapping[str, UploadFile]:
        """Uploaded files by field name."""
        return self._files


def parse_urlencoded(body: bytes) -> FormData:
    """Parse an ``application/x-www-form-urlencoded`` body."""
    parsed = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
    return FormData(parsed)


def parse_multipart(body: bytes, content_type: str) -> FormData:
    """Parse a ``multipart/form-data`` body.

    Parts carrying a ``filename`` in their ``Content-Disposition`` become
    ``UploadFile`` entries; every other part is a scalar field.

    Raises:
        ValueError: If the content type has no boundary or the body is
            not valid multipart framing.
    """
    _, options = parse_options_header(content_type)
    boundary = options.get(b"boundary")
    if not boundary:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    data: dict[str, list[str]] = {}
    files: dict[str, UploadFile] = {}

    part_headers: dict[str, str] = {}
    header_field = bytearray()
    header_value = bytearray()
    part_body = bytearray()

    def on_part_begin() -> None:
        part_headers.clear()
        part_body.clear()

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        header_field.extend(chunk[start:end])

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        header_value.extend(chunk[start:end])

    def on_header_end() -> None:
        part_headers[header_field.decode("latin-1").lower()] = header_value.decode("latin-1")
        header_field.clear()
        header_value.clear()

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        part_body.extend(chunk[start:end])

    def on_part_end() -> None:
        _, params = parse_options_header(part_headers.get("content-disposition", ""))
        name = params.get(b"name")
        if name is None:
            return
        field_name = name.decode("utf-8")
        filename = params.get(b"filename")
        if filename is not None:
            files[field_name] = UploadFile(
                filename=filename.decode("utf-8"),
                content_type=part_headers.get("content-type", "application/octet-stream"),
                content=bytes(part_body),
            )
        else:
            value = part_body.decode("utf-8", errors="replace")
            data.setdefault(field_name, []).append(value)

    callbacks: dict[str, Any] = {
        "on_part_begin": on_part_begin,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
        "on_header_end": on_header_end,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
    }

    # python-multipart parse errors subclass ValueError
    parser = MultipartParser(boundary, callbacks)
    parser.write(body)
    parser.finalize()

    return FormData(data, files)
