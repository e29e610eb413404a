"""
Minimal HTML tree for rewriting Mastodon post bodies

Only the subset Mastodon emits is supported: elements, attributes and text.
Start tags and character references are kept verbatim so that an untouched
tree serializes back to its source text.
"""

from html.parser import HTMLParser
from typing import Iterator, List, Optional, Tuple, Union

VOID_ELEMENTS = frozenset(
    [
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    ]
)


class Text:
    """Raw text run, character references left unconverted"""

    def __init__(self, data: str):
        self.data = data
        self.parent: Optional["Element"] = None

    def to_html(self) -> str:
        return self.data

    def is_blank(self) -> bool:
        return not self.data.strip()


Node = Union["Element", Text]


class Element:
    """HTML element with ordered attributes and children"""

    def __init__(
        self,
        tag: Optional[str],
        attrs: Optional[List[Tuple[str, Optional[str]]]] = None,
        start_text: Optional[str] = None,
    ):
        self.tag = tag
        self.attrs = list(attrs or [])
        self.start_text = start_text
        self.children: List[Node] = []
        self.parent: Optional["Element"] = None

    def get(self, name: str) -> Optional[str]:
        for key, value in self.attrs:
            if key == name:
                return value
        return None

    @property
    def classes(self) -> List[str]:
        return (self.get("class") or "").split()

    @property
    def is_void(self) -> bool:
        return self.tag in VOID_ELEMENTS

    def append(self, node: Node) -> None:
        node.parent = self
        self.children.append(node)

    def iter_elements(self) -> Iterator["Element"]:
        """Yield descendant elements in document order"""
        for child in self.children:
            if isinstance(child, Element):
                yield child
                yield from child.iter_elements()

    def text_content(self) -> str:
        parts = []
        for child in self.children:
            if isinstance(child, Text):
                parts.append(child.data)
            else:
                parts.append(child.text_content())
        return "".join(parts)

    def is_empty(self) -> bool:
        return all(
            isinstance(child, Text) and child.is_blank() for child in self.children
        )

    def to_html(self) -> str:
        inner = "".join(child.to_html() for child in self.children)
        if self.tag is None:
            return inner
        if self.is_void:
            return self._start_tag()
        return f"{self._start_tag()}{inner}</{self.tag}>"

    def _start_tag(self) -> str:
        if self.start_text:
            return self.start_text
        parts = [self.tag]
        for name, value in self.attrs:
            if value is None:
                parts.append(name)
            else:
                escaped = value.replace("&", "&amp;").replace('"', "&quot;")
                parts.append(f'{name}="{escaped}"')
        return "<" + " ".join(parts) + ">"


def remove(node: Node) -> None:
    if node.parent is not None:
        node.parent.children.remove(node)
        node.parent = None


def replace_with(node: Node, replacement: Node) -> None:
    parent = node.parent
    if parent is None:
        return
    index = parent.children.index(node)
    parent.children[index] = replacement
    replacement.parent = parent
    node.parent = None


def is_attached(node: Node, root: Element) -> bool:
    current: Optional[Node] = node
    while current is not None:
        if current is root:
            return True
        current = current.parent
    return False


class _TreeBuilder(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=False)
        self.root = Element(None)
        self.stack: List[Element] = [self.root]

    @property
    def current(self) -> Element:
        return self.stack[-1]

    def _add_text(self, data: str) -> None:
        children = self.current.children
        if children and isinstance(children[-1], Text):
            children[-1].data += data
        else:
            self.current.append(Text(data))

    def handle_starttag(self, tag, attrs):
        element = Element(tag, attrs, self.get_starttag_text())
        self.current.append(element)
        if not element.is_void:
            self.stack.append(element)

    def handle_startendtag(self, tag, attrs):
        self.current.append(Element(tag, attrs, self.get_starttag_text()))

    def handle_endtag(self, tag):
        # Close up to the nearest open element with this tag, ignore strays
        for depth in range(len(self.stack) - 1, 0, -1):
            if self.stack[depth].tag == tag:
                del self.stack[depth:]
                return

    def handle_data(self, data):
        self._add_text(data)

    def handle_entityref(self, name):
        self._add_text(f"&{name};")

    def handle_charref(self, name):
        self._add_text(f"&#{name};")

    def handle_comment(self, data):
        self._add_text(f"<!--{data}-->")


def parse_fragment(html: str) -> Element:
    """Parse an HTML fragment into a tree rooted at a tagless element"""
    builder = _TreeBuilder()
    builder.feed(html)
    builder.close()
    return builder.root
