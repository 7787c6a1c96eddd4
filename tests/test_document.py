import unittest

from bs4 import BeautifulSoup

from htmlgen.config import EMAIL
from htmlgen.nodes import Document, document, for_each, tag
from htmlgen.styles import Media, Pseudo
from htmlgen.sinks import render_bytes, render_string


def nav_menu():
    return tag(
        "ul",
        for_each(["Home", "About"], lambda item: tag("li", tag("a", item).attribute("href", f"/{item.lower()}"))),
    ).add_class("nav-menu")


class DocumentSkeletonTest(unittest.TestCase):
    def test_compact_skeleton(self) -> None:
        output = render_bytes(Document(body=tag("p", "X")))
        self.assertEqual(
            output,
            b"<!doctype html><html><head></head><body><p>X</p></body></html>",
        )

    def test_pretty_skeleton_without_styles(self) -> None:
        output = render_bytes(Document(body=nav_menu()), "pretty")
        self.assertEqual(
            output,
            b"<!doctype html>\n"
            b"<html>\n"
            b"  <head>\n"
            b"  </head>\n"
            b"  <body>\n"
            b'    <ul class="nav-menu">\n'
            b'      <li><a href="/home">Home</a>\n'
            b"      </li>\n"
            b'      <li><a href="/about">About</a>\n'
            b"      </li>\n"
            b"    </ul>\n"
            b"  </body>\n"
            b"</html>",
        )

    def test_pretty_skeleton_with_styles(self) -> None:
        body = tag("div", "Styled content").inline_style("color", "red").inline_style("font-size", "18px")
        output = render_bytes(Document(body=body), "pretty")
        self.assertEqual(
            output,
            b"<!doctype html>\n"
            b"<html>\n"
            b"  <head>\n"
            b"    <style>\n"
            b"      .color-0{color:red}\n"
            b"      .font-size-1{font-size:18px}\n"
            b"    </style>\n"
            b"  </head>\n"
            b"  <body>\n"
            b'    <div class="color-0 font-size-1">Styled content\n'
            b"    </div>\n"
            b"  </body>\n"
            b"</html>",
        )

    def test_head_content_and_lang(self) -> None:
        doc = document(tag("p", "X"), head=tag("title", "T"), lang="en")
        self.assertEqual(
            render_bytes(doc),
            b'<!doctype html><html lang="en"><head><title>T</title></head><body><p>X</p></body></html>',
        )


def test_identical_declarations_share_one_rule() -> None:
    body = tag(
        "div",
        tag("p", "a").inline_style("color", "red"),
        tag("p", "b").inline_style("color", "blue"),
        tag("span", "c").inline_style("color", "red"),
    )
    assert render_bytes(Document(body=body)) == (
        b"<!doctype html><html><head>"
        b"<style>.color-0{color:red}.color-1{color:blue}</style>"
        b"</head><body><div>"
        b'<p class="color-0">a</p><p class="color-1">b</p><span class="color-0">c</span>'
        b"</div></body></html>"
    )


def test_ancestor_classes_are_numbered_first() -> None:
    body = tag("div", tag("a", "Link").attribute("href", "#").inline_style("color", "blue")).inline_style(
        "padding", "20px"
    )
    soup = BeautifulSoup(render_string(Document(body=body)), "html.parser")
    assert soup.div["class"] == ["padding-0"]
    assert soup.a["class"] == ["color-1"]
    assert soup.a["href"] == "#"
    assert soup.style.string == ".padding-0{padding:20px}.color-1{color:blue}"


def test_at_rules_and_pseudo_classes() -> None:
    body = tag(
        "p",
        tag("span", "x").inline_style("color", "red", pseudo=Pseudo.HOVER),
    ).inline_style("color", "red").inline_style("color", "white", media=Media.DARK)
    soup = BeautifulSoup(render_string(Document(body=body)), "html.parser")
    assert soup.style.string == (
        ".color-0{color:red}"
        ".color-2:hover{color:red}"
        "@media (prefers-color-scheme: dark){.color-1{color:white}}"
    )
    assert soup.p["class"] == ["color-0", "color-1"]
    assert soup.span["class"] == ["color-2"]


def test_generated_names_avoid_caller_classes() -> None:
    for body in (
        tag("div", tag("p", "x").add_class("color-0"), tag("p", "y").inline_style("color", "red")),
        tag("div", tag("p", "y").inline_style("color", "red"), tag("p", "x").add_class("color-0")),
    ):
        soup = BeautifulSoup(render_string(Document(body=body)), "html.parser")
        classes = [p["class"] for p in soup.find_all("p")]
        assert ["color-0"] in classes
        assert ["color-1"] in classes
        assert soup.style.string == ".color-1{color:red}"


def test_email_preset_marks_rules_important() -> None:
    output = render_bytes(Document(body=tag("p", "x").inline_style("color", "red")), EMAIL)
    assert b"   .color-0{color:red !important}\n" in output
    soup = BeautifulSoup(output.decode("utf-8"), "html.parser")
    assert soup.p["class"] == ["color-0"]


def test_document_structure_parses() -> None:
    soup = BeautifulSoup(render_string(Document(body=nav_menu()), "pretty"), "html.parser")
    assert soup.html is not None
    assert soup.head is not None
    assert [a["href"] for a in soup.select("ul.nav-menu li a")] == ["/home", "/about"]
    assert soup.style is None
