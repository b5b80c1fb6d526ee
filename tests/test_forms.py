"""Tests for form body parsing — URL-encoded and multipart."""

import pytest

from junction._internal.multimap import ParamSource
from junction.http.forms import FormData, UploadFile, parse_multipart, parse_urlencoded

# ---------------------------------------------------------------------------
# FormData unit tests
# ---------------------------------------------------------------------------


class TestFormData:
    def test_getitem_returns_first(self) -> None:
        form = FormData({"color": ["red", "blue"]})
        assert form["color"] == "red"
        assert form.read("color") == "red"

    def test_get_list(self) -> None:
        form = FormData({"tags": ["python", "web"]})
        assert form.get_list("tags") == ["python", "web"]
        assert form.get_list("missing") == []

    def test_get_with_default(self) -> None:
        form = FormData({})
        assert form.get("missing") is None
        assert form.get("missing", "fallback") == "fallback"

    def test_files_are_not_fields(self) -> None:
        upload = UploadFile("a.txt", "text/plain", b"hi")
        form = FormData({"title": ["x"]}, {"doc": upload})
        assert form.has("title") is True
        assert form.has("doc") is False
        assert "doc" not in form
        assert form.files["doc"] is upload
        assert list(form) == ["title"]

    def test_is_param_source(self) -> None:
        assert isinstance(FormData(), ParamSource)


class TestUploadFile:
    def test_size_and_repr(self) -> None:
        upload = UploadFile("notes.md", "text/markdown", b"# Notes")
        assert upload.size == 7
        assert repr(upload) == "UploadFile('notes.md', 'text/markdown', 7 bytes)"


# ---------------------------------------------------------------------------
# URL-encoded
# ---------------------------------------------------------------------------


class TestParseURLEncoded:
    def test_fields(self) -> None:
        form = parse_urlencoded(b"title=Hello+World&tag=a&tag=b&empty=")
        assert form["title"] == "Hello World"
        assert form.get_list("tag") == ["a", "b"]
        assert form.has("empty") is True
        assert form["empty"] == ""

    def test_percent_encoded_utf8(self) -> None:
        assert parse_urlencoded(b"name=J%C3%BCrgen")["name"] == "Jürgen"

    def test_empty_body(self) -> None:
        assert len(parse_urlencoded(b"")) == 0


# ---------------------------------------------------------------------------
# Multipart
# ---------------------------------------------------------------------------


class TestParseMultipart:
    def test_scalar_fields(self, multipart) -> None:
        body, content_type = multipart({"title": "Groceries", "folder": "3"})
        form = parse_multipart(body, content_type)
        assert form["title"] == "Groceries"
        assert form["folder"] == "3"
        assert form.files == {}

    def test_file_part(self, multipart) -> None:
        body, content_type = multipart(
            {"title": "Report"},
            {"attachment": ("report.csv", "text/csv", b"a,b\n1,2\n")},
        )
        form = parse_multipart(body, content_type)
        assert form["title"] == "Report"
        upload = form.files["attachment"]
        assert upload.filename == "report.csv"
        assert upload.content_type == "text/csv"
        assert upload.content == b"a,b\n1,2\n"
        assert form.has("attachment") is False

    def test_binary_file_content_preserved(self, multipart) -> None:
        payload = bytes(range(256))
        body, content_type = multipart(files={"blob": ("blob.bin", "application/octet-stream", payload)})
        assert parse_multipart(body, content_type).files["blob"].content == payload

    def test_missing_boundary(self) -> None:
        with pytest.raises(ValueError, match="boundary"):
            parse_multipart(b"", "multipart/form-data")

    def test_malformed_body(self) -> None:
        with pytest.raises(ValueError):
            parse_multipart(b"not multipart at all", "multipart/form-data; boundary=xyz")
