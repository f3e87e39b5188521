"""Command-line harness tests."""

import pytest

from feedwatch import cli
from feedwatch.detection import ContentExtractor
from feedwatch.errors import FeedwatchError

from conftest import FakeFetcher, blog_page, make_site


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    # main() would install a JSON handler bound to the captured stderr
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


def test_translate_prints_selector(capsys):
    assert cli.main(["translate", "//article//a[contains(@href,'/blog/')]/@href"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == ['article a[href*="/blog/"]', "attribute: href"]


def test_translate_rejects_unsupported(capsys):
    assert cli.main(["translate", "//a[position()>1]"]) == 2
    assert "unsupported predicate" in capsys.readouterr().err


def test_unknown_sites_file(tmp_path):
    assert cli.main(["--sites-file", str(tmp_path / "missing.yaml"), "check"]) == 2


def test_select_sites():
    sites = [make_site("a"), make_site("b", enabled=False)]

    assert [s.id for s in cli._select_sites(sites, None)] == ["a"]
    assert [s.id for s in cli._select_sites(sites, "b")] == ["b"]
    with pytest.raises(FeedwatchError, match="available: a, b"):
        cli._select_sites(sites, "c")


@pytest.mark.asyncio
async def test_check_site_lists_articles(capsys):
    site = make_site()
    fetcher = FakeFetcher({site.url: blog_page(("One", "/1"), ("Two", "/2"))})

    assert await cli.check_site(fetcher, ContentExtractor(), site) is True

    out = capsys.readouterr().out
    assert "2 articles:" in out
    assert "https://blog.example.com/1" in out
    assert "links: 2/2 articles have a url" in out


@pytest.mark.asyncio
async def test_check_site_probes_fallbacks_when_empty(capsys):
    site = make_site(title_selector="h2.missing")
    fetcher = FakeFetcher({site.url: blog_page(("One", "/1"))})

    assert await cli.check_site(fetcher, ContentExtractor(), site) is False

    out = capsys.readouterr().out
    assert "trying common selectors" in out
    assert "//h2 -> 1 matches" in out


@pytest.mark.asyncio
async def test_check_site_reports_fetch_failure(capsys):
    site = make_site()

    assert await cli.check_site(FakeFetcher(), ContentExtractor(), site) is False
    assert "fetch failed" in capsys.readouterr().out
