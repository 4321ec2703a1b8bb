"""
Tests for the binary-vs-text resolver and destination path rewriting.
"""

import os

import pytest

from services.fetchers.resource_types import (
    classify_resource,
    get_disposition_extension,
    parse_content_type,
    resolve_destination_path,
    resolve_download_target,
)
from services.fetchers.types import ClassificationResult, ResponseMetadata
from utils.url_utils import get_url_extension


class TestClassifyResource:
    def test_pdf_content_type_without_url_extension(self):
        result = classify_resource("application/pdf", "", "https://example.com/report", "out/report")

        assert result.is_binary_file is True
        assert result.effective_content_type == "application/pdf"
        assert result.expected_extension == ".pdf"

    def test_url_extension_wins_over_content_type(self):
        result = classify_resource("application/pdf", "", "https://example.com/page.html", "out/page")

        assert result.is_binary_file is False
        assert result.expected_extension == ".html"

    def test_octet_stream_refined_by_url_extension(self):
        result = classify_resource(
            "application/octet-stream", "", "https://example.com/archive.zip", "out/archive"
        )

        assert result.is_binary_file is True
        assert result.effective_content_type == "application/zip"
        assert result.expected_extension == ".zip"

    def test_server_side_script_extension_is_ignored(self):
        result = classify_resource("text/html; charset=utf-8", "", "https://example.com/index.php", "page.md")

        assert result.is_binary_file is False
        assert result.effective_content_type == "text/html"
        assert result.expected_extension == ".html"

    def test_server_side_script_serving_an_image(self):
        result = classify_resource("image/png", "", "https://example.com/avatar.php?id=7", "avatar")

        assert result.is_binary_file is True
        assert result.expected_extension == ".png"

    def test_content_disposition_forces_binary(self):
        result = classify_resource(
            "text/html", 'attachment; filename="report.xlsx"', "https://example.com/download.php", "report"
        )

        assert result.is_binary_file is True
        assert result.expected_extension == ".xlsx"
        assert result.extension_source == "Content-Disposition header"

    def test_octet_stream_with_disposition_filename(self):
        result = classify_resource(
            "application/octet-stream", 'attachment; filename="report.pdf"', "https://example.com/get", "out/x"
        )

        assert result.is_binary_file is True
        assert result.expected_extension == ".pdf"

    def test_json_from_server_side_endpoint(self):
        result = classify_resource("application/json", "", "https://example.com/export.do", "out/export")

        assert result.is_binary_file is True
        assert result.expected_extension == ".json"

    def test_classification_is_pure(self):
        args = ("application/octet-stream", "", "https://example.com/a.zip", "out/a")

        assert classify_resource(*args) == classify_resource(*args)

    def test_octet_stream_without_extension_keeps_path(self):
        result = classify_resource("application/octet-stream", "", "https://example.com/blob", "out/blob")

        assert result.is_binary_file is True
        assert result.expected_extension == ""
        assert resolve_destination_path("out/blob", result) == "out/blob"

    def test_no_signals_means_text(self):
        result = classify_resource("", "", "https://example.com/", "out")

        assert result.is_binary_file is False
        assert result.effective_content_type is None
        assert result.expected_extension is None

    def test_path_extension_is_last_resort(self):
        result = classify_resource("", "", "https://example.com/", "out/data.json")

        assert result.effective_content_type == "application/json"
        assert result.is_binary_file is True
        assert result.expected_extension == ".json"

    def test_text_plain_upgraded_by_path_extension(self):
        result = classify_resource("text/plain", "", "https://example.com/export", "export.csv")

        assert result.effective_content_type == "text/csv"
        assert result.is_binary_file is True


class TestResolveDestinationPath:
    zip_result = ClassificationResult(
        is_binary_file=True,
        effective_content_type="application/zip",
        expected_extension=".zip",
    )

    def test_directory_gets_default_file_name(self):
        assert resolve_destination_path("out/", self.zip_result) == os.path.join("out/", "download.zip")

    def test_missing_extension_is_appended(self):
        assert resolve_destination_path("out/file", self.zip_result) == "out/file.zip"

    def test_wrong_extension_is_replaced(self):
        assert resolve_destination_path("out/file.txt", self.zip_result) == "out/file.zip"

    def test_matching_extension_is_kept_case_insensitive(self):
        assert resolve_destination_path("out/FILE.ZIP", self.zip_result) == "out/FILE.ZIP"

    def test_text_is_never_rewritten(self):
        text_result = ClassificationResult(
            is_binary_file=False,
            effective_content_type="text/html",
            expected_extension=".html",
        )

        assert resolve_destination_path("notes.md", text_result) == "notes.md"

    @pytest.mark.parametrize("file_path", ["out/", "out/file", "out/file.txt", "out/file.zip"])
    def test_idempotent(self, file_path):
        once = resolve_destination_path(file_path, self.zip_result)

        assert resolve_destination_path(once, self.zip_result) == once


def test_resolve_download_target_uses_headers():
    metadata = ResponseMetadata(
        content_type="application/pdf",
        content_disposition="",
        status=200,
        final_url="https://example.com/paper",
    )

    classification, final_path = resolve_download_target(metadata, "https://example.com/paper", "papers/x")

    assert classification.is_binary_file is True
    assert final_path == "papers/x.pdf"


@pytest.mark.parametrize("header, expected", [
    ('attachment; filename="document.pdf"', ".pdf"),
    ("attachment; filename=archive.tar.gz", ".gz"),
    ("attachment; filename*=UTF-8''data%20file.CSV", ".csv"),
    ("attachment; filename='slides.pptx'; size=1024", ".pptx"),
    ("inline", None),
    ('attachment; filename="README"', None),
    ("", None),
    (None, None),
])
def test_get_disposition_extension(header, expected):
    assert get_disposition_extension(header) == expected


@pytest.mark.parametrize("header, expected", [
    ("Application/PDF; charset=binary", "application/pdf"),
    ("text/html", "text/html"),
    ("", ""),
    (None, ""),
])
def test_parse_content_type(header, expected):
    assert parse_content_type(header) == expected


@pytest.mark.parametrize("url, expected", [
    ("https://example.com/files/Report.PDF?download=1", ".pdf"),
    ("https://example.com/a%20b.zip#top", ".zip"),
    ("https://example.com", ""),
    ("https://example.com/dir/", ""),
])
def test_get_url_extension(url, expected):
    assert get_url_extension(url) == expected
