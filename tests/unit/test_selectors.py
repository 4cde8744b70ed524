"""Tests for selector utilities."""

import pytest

from rvp.core.exceptions import ConfigurationError, MalformedDocumentError
from rvp.core.selectors import Selector, parse_document, select_text, validate_selector


@pytest.fixture
def sample_html():
    """Sample HTML for testing."""
    return """
    <html>
    <head><title>Test Page</title></head>
    <body>
        <div>
            <h1>Example Domain</h1>
            <p class="price">
                $1,234.50
            </p>
            <p class="change"><span>+</span> <b>2.5</b>%</p>
            <p class="empty"></p>
        </div>
    </body>
    </html>
    """


@pytest.fixture
def soup(sample_html):
    """Parsed document fixture."""
    return parse_document(sample_html)


class TestParseDocument:
    """Tests for parse_document."""

    def test_parses_html(self, soup):
        """Test HTML is parsed."""
        assert soup.title.get_text() == "Test Page"

    def test_empty_document(self):
        """Test empty content is malformed."""
        with pytest.raises(MalformedDocumentError):
            parse_document("")

    def test_whitespace_document(self):
        """Test whitespace-only content is malformed."""
        with pytest.raises(MalformedDocumentError):
            parse_document("   \n ")


class TestSelector:
    """Tests for Selector class."""

    def test_css_one_selector(self, soup):
        """Test CSS one selector."""
        result = Selector(soup, "https://example.com").css_one("body > div > h1")

        assert result.found is True
        assert result.value == "Example Domain"

    def test_css_one_strips_whitespace(self, soup):
        """Test matched text is trimmed."""
        result = Selector(soup).css_one(".price")
        assert result.value == "$1,234.50"

    def test_css_one_joins_text_nodes(self, soup):
        """Test nested text nodes are joined with spaces."""
        result = Selector(soup).css_one(".change")
        assert result.value == "+ 2.5 %"

    def test_css_one_not_found(self, soup):
        """Test CSS selector when not found."""
        result = Selector(soup).css_one(".nonexistent")

        assert result.found is False
        assert result.value is None

    def test_first_match_wins(self, soup):
        """Test only the first matching element is used."""
        result = Selector(soup).css_one("p")
        assert result.value == "$1,234.50"


class TestSelectText:
    """Tests for select_text."""

    def test_found(self, soup):
        """Test matched text is returned."""
        assert select_text(soup, "h1") == "Example Domain"

    def test_empty_element(self, soup):
        """Test matched empty element yields empty text, not None."""
        assert select_text(soup, ".empty") == ""

    def test_not_found(self, soup):
        """Test missing element yields None."""
        assert select_text(soup, "h2") is None


class TestValidateSelector:
    """Tests for validate_selector."""

    def test_valid(self):
        """Test valid selectors pass."""
        validate_selector("body > div > h1")
        validate_selector("#search a[href^='http']:nth-child(2)")

    @pytest.mark.parametrize("selector", ["", "   ", "div >", "a[href", "::"])
    def test_invalid(self, selector):
        """Test invalid selectors raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            validate_selector(selector)
