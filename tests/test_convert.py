"""Tests for link conversion."""

import os
from webget.config import Config
from webget.convert import convert_all_links, convert_links, relative_link


class TestRelativeLink:
    """Test relative paths between local files."""

    def test_same_directory(self, tmp_path):
        assert relative_link(str(tmp_path / "a.html"), str(tmp_path / "b.html")) == "b.html"

    def test_other_directory(self, tmp_path):
        from_file = str(tmp_path / "site" / "docs" / "index.html")
        to_file = str(tmp_path / "site" / "img" / "logo.png")
        assert relative_link(from_file, to_file) == "../img/logo.png"


class TestConvertLinks:
    """Test rewriting links inside a document."""

    def setup_method(self):
        """Set up test fixtures."""
        self.config = Config()

    def test_downloaded_and_remote_links(self, tmp_path):
        """Test that local copies become relative and the rest absolute."""
        page = tmp_path / "index.html"
        logo = tmp_path / "img" / "logo.png"
        page.write_text('<a href="about.html#team">About</a><img src="img/logo.png">')
        downloaded = {
            "http://example.com/index.html": str(page),
            "http://example.com/img/logo.png": str(logo),
        }

        assert convert_links(self.config, str(page), "http://example.com/index.html", downloaded) is True

        content = page.read_text()
        assert 'href="http://example.com/about.html#team"' in content
        assert 'src="img/logo.png"' in content
        assert not os.path.exists(str(page) + ".orig")

    def test_unchanged_document(self, tmp_path):
        """Test that a document without rewritable links is left alone."""
        page = tmp_path / "index.html"
        page.write_text('<a href="#top">Top</a><a href="mailto:me@example.com">Mail</a>')
        assert convert_links(self.config, str(page), "http://example.com/", {}) is False

    def test_backup_converted(self, tmp_path):
        """Test that --backup-converted keeps the original as .orig."""
        self.config.backup_converted = True
        page = tmp_path / "index.html"
        original = '<a href="/other.html">Other</a>'
        page.write_text(original)

        assert convert_links(self.config, str(page), "http://example.com/", {}) is True
        assert (tmp_path / "index.html.orig").read_text() == original
        assert 'href="http://example.com/other.html"' in page.read_text()


class TestConvertAllLinks:
    """Test converting a whole run."""

    def test_only_html_files(self, tmp_path):
        """Test that non-HTML downloads are not parsed."""
        page = tmp_path / "index.html"
        data = tmp_path / "data.bin"
        page.write_text('<a href="data.bin">data</a>')
        data.write_bytes(b'<a href="x">')
        downloaded = {
            "http://example.com/": str(page),
            "http://example.com/index.html": str(page),
            "http://example.com/data.bin": str(data),
        }

        convert_all_links(Config(), downloaded, {str(page)})

        assert 'href="data.bin"' in page.read_text()
        assert data.read_bytes() == b'<a href="x">'

    def test_missing_file_skipped(self, tmp_path):
        """Test that deleted files are skipped."""
        missing = str(tmp_path / "gone.html")
        convert_all_links(Config(), {"http://example.com/": missing}, {missing})
        assert not os.path.exists(missing)
