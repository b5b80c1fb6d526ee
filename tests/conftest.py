"""Shared fixtures for junction tests."""

from collections.abc import Callable

import pytest

BOUNDARY = "junction-test-boundary"

MultipartBuilder = Callable[..., tuple[bytes, str]]


def build_multipart(
    fields: dict[str, str] | None = None,
    files: dict[str, tuple[str, str, bytes]] | None = None,
) -> tuple[bytes, str]:
    """Encode *fields* and *files* as ``multipart/form-data``.

    ``files`` maps a field name to ``(filename, content_type, content)``.
    Returns ``(body, content_type_header)``.
    """
    parts: list[bytes] = []
    for name, value in (fields or {}).items():
        parts.append(
            f'--{BOUNDARY}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'.encode()
            + value.encode()
            + b"\r\n"
        )
    for name, (filename, content_type, content) in (files or {}).items():
        parts.append(
            (
                f"--{BOUNDARY}\r\n"
                f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
                f"Content-Type: {content_type}\r\n\r\n"
            ).encode()
            + content
            + b"\r\n"
        )
    parts.append(f"--{BOUNDARY}--\r\n".encode())
    return b"".join(parts), f"multipart/form-data; boundary={BOUNDARY}"


@pytest.fixture
def multipart() -> MultipartBuilder:
    return build_multipart
