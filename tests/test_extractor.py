"""Tests for content extraction and URL normalization."""

import pytest

from feedwatch.detection import ContentExtractor, extract_articles, normalize_url
from feedwatch.models import ArticleInfo

from conftest import make_site


@pytest.mark.parametrize(
    "url,base,expected",
    [
        ("https://other.example/post", "https://blog.example.com/blog/", "https://other.example/post"),
        ("//cdn.example.com/post", "https://blog.example.com/blog/", "https://cdn.example.com/post"),
        ("/posts/one", "https://blog.example.com/blog/", "https://blog.example.com/posts/one"),
        ("post/1", "https://blog.example.com/blog/", "https://blog.example.com/blog/post/1"),
        ("../about", "https://blog.example.com/blog/", "https://blog.example.com/about"),
        ("  /padded  ", "https://blog.example.com/", "https://blog.example.com/padded"),
        ("", "https://blog.example.com/", ""),
    ],
)
def test_normalize_url(url, base, expected):
    assert normalize_url(url, base) == expected


def test_h2_titles_pair_with_wrapping_links():
    markup = """
    <html><body>
      <a href="/posts/one"><h2>First post</h2></a>
      <a href="https://other.example/two"><h2>Second post</h2></a>
      <h2>Third post</h2>
    </body></html>
    """
    site = make_site(title_selector="h2", link_selector="a/@href")

    result = extract_articles(markup, site)

    assert result.articles == [
        ArticleInfo(title="First post", url="https://blog.example.com/posts/one"),
        ArticleInfo(title="Second post", url="https://other.example/two"),
        ArticleInfo(title="Third post", url=None),
    ]
    assert result.content == "First post\nSecond post\nThird post"


def test_xpath_title_selector():
    markup = """
    <h2 class="title">  Kept
    </h2>
    <h2 class="other">Skipped</h2>
    <h2 class="title">Also kept</h2>
    """
    site = make_site(title_selector="//h2[@class='title']", link_selector=None)

    result = extract_articles(markup, site)

    assert [a.title for a in result.articles] == ["Kept", "Also kept"]
    assert all(a.url is None for a in result.articles)


def test_attribute_title_selector():
    markup = '<a title="From attribute" href="/x">ignored text</a>'
    site = make_site(title_selector="//a/@title", link_selector="//a/@href")

    result = extract_articles(markup, site)

    assert result.articles == [ArticleInfo(title="From attribute", url="https://blog.example.com/x")]


def test_css_link_selector_reads_href():
    markup = '<h3>One</h3><a class="post" href="/one">read</a>'
    site = make_site(title_selector="h3", link_selector="a.post")

    result = extract_articles(markup, site)

    assert result.articles == [ArticleInfo(title="One", url="https://blog.example.com/one")]


def test_blank_title_drops_its_slot():
    markup = """
    <a href="/a"><h2>A</h2></a>
    <a href="/b"><h2>   </h2></a>
    <a href="/c"><h2>C</h2></a>
    """
    site = make_site(title_selector="h2", link_selector="a/@href")

    result = extract_articles(markup, site)

    assert result.articles == [
        ArticleInfo(title="A", url="https://blog.example.com/a"),
        ArticleInfo(title="C", url="https://blog.example.com/c"),
    ]


def test_link_without_attribute_gives_no_url():
    markup = '<a href="/a"><h2>A</h2></a><a name="anchor"><h2>B</h2></a>'
    site = make_site(title_selector="h2", link_selector="a/@href")

    result = extract_articles(markup, site)

    assert [a.url for a in result.articles] == ["https://blog.example.com/a", None]


def test_no_matches_gives_empty_content():
    site = make_site(title_selector="h2.missing", link_selector=None)

    result = extract_articles("<html><body><p>nothing</p></body></html>", site)

    assert result.content == ""
    assert result.articles == []


def test_untranslatable_xpath_gives_empty_content():
    site = make_site(title_selector="//h2[position()>1]", link_selector=None)

    result = ContentExtractor().extract("<h2>One</h2><h2>Two</h2>", site)

    assert result.content == ""
    assert result.articles == []


def test_invalid_css_gives_empty_content():
    site = make_site(title_selector="h2[[", link_selector=None)

    result = ContentExtractor().extract("<h2>One</h2>", site)

    assert result.content == ""
