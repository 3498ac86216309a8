"""
Archive Validator Tests

Run with: pytest tests/test_validator.py -v
"""

import zipfile

from emmm_core.packaging import pack
from emmm_core.validation import ArchiveValidator


def write_container(path, entries):
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return path


class TestArchiveValidator:
    """Tests for container layout validation."""

    def test_packed_container_is_valid(self, tmp_path, make_file):
        first = make_file("a/x.png", b"1")
        second = make_file("b/x.png", b"2")
        container = tmp_path / "doc.zip"
        pack(f"file:{first}; file:{second};", container)

        result = ArchiveValidator().validate_package(container)

        assert result.is_valid
        assert result.warning_count == 0
        assert result.metadata["stored_assets"] == 2
        assert "PASSED" in result.summary()

    def test_missing_asset_is_an_error(self, tmp_path):
        container = write_container(tmp_path / "doc.zip", {"source.emmm": "asset:gone.png;"})

        result = ArchiveValidator().validate_package(container)

        assert not result.is_valid
        assert result.get_errors_by_type() == {"Missing Asset": 1}

    def test_unreferenced_asset_is_a_warning(self, tmp_path):
        container = write_container(tmp_path / "doc.zip", {
            "source.emmm": "no tokens",
            "assets/extra.png": b"x",
        })

        result = ArchiveValidator().validate_package(container)

        assert result.is_valid
        assert result.warning_count == 1
        assert result.errors[0]["type"] == "Unreferenced Asset"

    def test_unsafe_entry_is_an_error(self, tmp_path):
        container = write_container(tmp_path / "doc.zip", {
            "source.emmm": "",
            "../escape.txt": b"x",
        })

        result = ArchiveValidator().validate_package(container)

        assert result.get_errors_by_type() == {"Unsafe Entry": 1}

    def test_missing_document(self, tmp_path):
        container = write_container(tmp_path / "doc.zip", {"assets/a.png": b"x"})

        result = ArchiveValidator().validate_package(container)

        assert result.get_errors_by_type() == {"Missing Document": 1}

    def test_not_a_container(self, tmp_path):
        bogus = tmp_path / "bogus.zip"
        bogus.write_bytes(b"nope")

        result = ArchiveValidator().validate_package(bogus)

        assert not result.is_valid
        assert "FAILED" in result.summary()
