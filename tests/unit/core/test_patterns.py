"""Unit tests for core/patterns.py"""

from notakit.core.parse import parse_markdown
from notakit.core.patterns import default_patterns, extract_youtube_id, parse_options, parse_table_row


def _only(text: str):
    result = parse_markdown(text)
    assert len(result.blocks) == 1, [b.type for b in result.blocks]
    return result.blocks[0]


def test_priorities_unique_and_ascending():
    priorities = [p.priority for p in default_patterns()]
    assert priorities == sorted(priorities)
    assert len(set(priorities)) == len(priorities)


def test_grouped_patterns_rank_before_singular():
    order = {p.block_type: p.priority for p in default_patterns()}
    assert order["multipleImages"] < order["image"]
    assert order["bibliography"] < order["citation"]
    assert order["executableCodeBlock"] < order["code"]


def test_parse_table_row():
    assert parse_table_row("| a | b  |") == ["a", "b"]
    assert parse_table_row("|  |x|") == ["", "x"]


def test_parse_options():
    assert parse_options("timeout=30, session = main") == {"timeout": "30", "session": "main"}
    assert parse_options("novalue, =x") == {}


def test_extract_youtube_id():
    assert extract_youtube_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ") == "dQw4w9WgXcQ"
    assert extract_youtube_id("https://youtu.be/dQw4w9WgXcQ") == "dQw4w9WgXcQ"
    assert extract_youtube_id("dQw4w9WgXcQ") == "dQw4w9WgXcQ"
    assert extract_youtube_id("https://example.com") == ""


def test_heading_levels():
    assert _only("### Deep").attributes == {"level": 3, "text": "Deep"}


def test_seven_hashes_is_not_a_heading():
    assert _only("####### too deep").type == "text"


def test_code_without_language_defaults_to_text():
    assert _only("```\nplain\n```").attributes["language"] == "text"


def test_executable_code_with_options():
    block = _only("```{python, timeout=30}\nx = 1\n```")
    assert block.type == "executableCodeBlock"
    assert block.attributes == {"language": "python", "options": {"timeout": "30"}, "content": "x = 1"}


def test_math_block():
    block = _only("$$\n\\frac{a}{b}\n$$")
    assert block.type == "math"
    assert block.attributes == {"latex": "\\frac{a}{b}", "display_mode": True}


def test_table_without_rows_warns():
    block = _only("| a | b |\n|---|---|")
    assert block.type == "table"
    assert block.attributes == {"headers": ["a", "b"], "rows": []}
    assert block.metadata.is_valid
    assert block.metadata.warnings == ["Table has no data rows"]


def test_table_rows():
    block = _only("| a | b |\n|:--|--:|\n| 1 | 2 |\n| 3 | 4 |")
    assert block.attributes["rows"] == [["1", "2"], ["3", "4"]]


def test_blockquote_joins_lines():
    block = _only("> first\n> second")
    assert block.type == "quote"
    assert block.attributes["content"] == "first\nsecond"


def test_ordered_list():
    block = _only("1. one\n2. two")
    assert block.attributes == {"list_type": "ordered", "items": ["one", "two"]}


def test_unordered_list():
    block = _only("* a\n* b")
    assert block.attributes == {"list_type": "unordered", "items": ["a", "b"]}


def test_horizontal_rule():
    assert _only("***").type == "horizontalRule"


def test_link_with_relative_url_warns():
    block = _only("[docs](guide.html)")
    assert block.type == "link"
    assert block.metadata.is_valid
    assert block.metadata.warnings == ["Link URL may not be valid"]


def test_link_with_absolute_url():
    block = _only("[site](https://example.com)")
    assert block.attributes == {"text": "site", "url": "https://example.com"}
    assert block.metadata.warnings == []


def test_image_with_title():
    block = _only('![A cat](cat.png "Sleeping")')
    assert block.type == "image"
    assert block.attributes == {"alt": "A cat", "src": "cat.png", "title": "Sleeping"}


def test_image_without_alt_warns():
    block = _only("![](cat.png)")
    assert block.metadata.warnings == ["Image should have alt text for accessibility"]


def test_multiple_images():
    block = _only("![a](1.png) ![b](2.png)")
    assert block.type == "multipleImages"
    assert [i["src"] for i in block.attributes["images"]] == ["1.png", "2.png"]


def test_youtube_beats_image():
    block = _only("![youtube](https://youtu.be/dQw4w9WgXcQ)")
    assert block.type == "youtube"
    assert block.attributes == {"video_id": "dQw4w9WgXcQ"}


def test_youtube_with_bad_id_is_invalid():
    block = _only("![youtube](https://example.com/video)")
    assert not block.metadata.is_valid
    assert block.metadata.errors == ["YouTube video ID could not be extracted"]


def test_mermaid_without_keyword_warns():
    block = _only("```mermaid\nA --> B\n```")
    assert block.type == "mermaid"
    assert block.metadata.warnings == ["Mermaid content may not be valid diagram syntax"]


def test_mermaid_with_keyword():
    assert _only("```mermaid\ngraph TD\nA --> B\n```").metadata.warnings == []


def test_theorem_with_title():
    block = _only("\\begin{theorem}[Pythagoras]\na^2 + b^2 = c^2\n\\end{theorem}")
    assert block.type == "theorem"
    assert block.attributes == {"title": "Pythagoras", "content": "a^2 + b^2 = c^2"}


def test_theorem_default_title():
    assert _only("\\begin{theorem}\nx\n\\end{theorem}").attributes["title"] == "Theorem"


def test_custom_fences():
    assert _only("```confusion-matrix\n[[1, 2], [3, 4]]\n```").attributes["matrix_data"] == "[[1, 2], [3, 4]]"
    assert _only("```pipeline\nload -> train\n```").attributes["description"] == "load -> train"
    drawio = _only("```drawio\n<mxfile/>\n```")
    assert drawio.attributes == {"diagram_data": "<mxfile/>", "width": 800, "height": 600}


def test_ai_generation_timestamp_is_iso():
    block = _only("```ai\nWrite a haiku\n```")
    assert block.attributes["prompt"] == "Write a haiku"
    assert "T" in block.attributes["timestamp"]
