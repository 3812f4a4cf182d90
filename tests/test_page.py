from bs4 import BeautifulSoup

from notionsmith.adapters.html.page import PageFormatter


def test_page_wraps_body_and_escapes_title() -> None:
    html = PageFormatter().render(
        "<p>Body</p>", title="Fish & <Chips>", page_id="abc", stylesheet="/site.css"
    )

    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Fish &amp; &lt;Chips&gt;</title>" in html
    soup = BeautifulSoup(html, "html.parser")
    article = soup.find("article")
    assert article["class"] == ["notion-page"]
    assert article["data-page-id"] == "abc"
    assert article.find("h1").get_text() == "Fish & <Chips>"
    assert article.find("p").get_text() == "Body"
    assert soup.find("link")["href"] == "/site.css"


def test_page_without_title_skips_heading() -> None:
    html = PageFormatter().render("<p>x</p>", language="fr")

    soup = BeautifulSoup(html, "html.parser")
    assert soup.find("html")["lang"] == "fr"
    assert soup.find("h1") is None
    assert soup.find("link") is None
    assert soup.find("article").get("data-page-id") is None
