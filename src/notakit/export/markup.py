"""BeautifulSoup helpers shared by the export passes"""

from bs4 import BeautifulSoup, PageElement, Tag


PARSER = "html.parser"


def new_document() -> BeautifulSoup:
    """An empty soup to build a page body into."""
    return BeautifulSoup('', PARSER)


def parse_fragment(markup: str) -> list[PageElement]:
    """Parse an HTML fragment into detached top-level nodes."""
    return [node.extract() for node in list(BeautifulSoup(markup, PARSER).contents)]


def classes(tag: Tag) -> list[str]:
    value = tag.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


def has_class(tag: Tag, name: str) -> bool:
    return name in classes(tag)


def add_class(tag: Tag, name: str) -> None:
    if not has_class(tag, name):
        tag["class"] = classes(tag) + [name]
