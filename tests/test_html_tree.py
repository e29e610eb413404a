"""
Tests for the minimal HTML tree
"""

import sys
from pathlib import Path

# Add the parent directory to sys.path to import src as a package
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.html_tree import (
    Element,
    Text,
    is_attached,
    parse_fragment,
    remove,
    replace_with,
)


class TestParseFragment:
    """Test suite for parsing and serializing fragments"""

    def test_round_trip_untouched_tree(self):
        """Test that an unmodified tree serializes to its source"""
        html = (
            '<p>Hi <a href="https://a.example/?x=1&amp;y=2" class="mention hashtag" '
            "rel='tag'>#<span>tag</span></a> &lt;3 &#128512;<br>next</p>"
            "<p>second</p>"
        )

        assert parse_fragment(html).to_html() == html

    def test_structure(self):
        root = parse_fragment('<p>Hello <a class="hashtag x">#<span>t</span></a></p>')

        assert root.tag is None
        paragraph = root.children[0]
        assert isinstance(paragraph, Element)
        assert paragraph.tag == "p"
        text, link = paragraph.children
        assert isinstance(text, Text)
        assert text.data == "Hello "
        assert link.classes == ["hashtag", "x"]
        assert link.text_content() == "#t"
        assert link.parent is paragraph

    def test_void_elements_do_not_nest(self):
        root = parse_fragment("<p>a<br>b<img src='x.png'>c</p>")

        paragraph = root.children[0]
        tags = [
            child.tag if isinstance(child, Element) else child.data
            for child in paragraph.children
        ]
        assert tags == ["a", "br", "b", "img", "c"]

    def test_stray_end_tag_ignored(self):
        root = parse_fragment("<p>text</span></p>")

        assert root.to_html() == "<p>text</p>"

    def test_unclosed_element_closed_on_output(self):
        assert parse_fragment("<p>open").to_html() == "<p>open</p>"

    def test_iter_elements_document_order(self):
        root = parse_fragment("<p><a>1</a><span><a>2</a></span></p><a>3</a>")

        assert [e.text_content() for e in root.iter_elements() if e.tag == "a"] == [
            "1",
            "2",
            "3",
        ]


class TestTreeEditing:
    """Test suite for tree editing helpers"""

    def test_remove(self):
        root = parse_fragment("<p>keep</p><p>drop</p>")

        remove(root.children[1])

        assert root.to_html() == "<p>keep</p>"

    def test_replace_with_and_attachment(self):
        root = parse_fragment("<p>a <i>b</i></p>")
        italic = root.children[0].children[1]

        replace_with(italic, Text("B"))

        assert root.to_html() == "<p>a B</p>"
        assert not is_attached(italic, root)
        assert is_attached(root.children[0], root)

    def test_generated_start_tag_escapes_attributes(self):
        element = Element("a", [("title", 'say "hi" & go'), ("hidden", None)])

        assert element.to_html() == '<a title="say &quot;hi&quot; &amp; go" hidden></a>'

    def test_is_empty(self):
        root = parse_fragment("<p> </p><p>x</p>")

        assert root.children[0].is_empty()
        assert not root.children[1].is_empty()
