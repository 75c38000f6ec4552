"""Shared fixtures for core unit tests"""

import pytest

from notakit.core.parse import MarkdownParser


SAMPLE_MD = """\
# Title

Intro paragraph.

```python
print("hi")
```

$$
E = mc^2
$$

| a | b |
|---|---|
| 1 | 2 |

> quoted line

- one
- two

---

![alt](img.png "Caption")

@doe2020 @smith2021
"""


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="parser")
def parser_fixture():
    return MarkdownParser()


@pytest.fixture(name="sample_result")
def sample_result_fixture(parser, sample_md):
    return parser.parse(sample_md)
