"""Standalone HTML page template and embedded export styles"""

from html import escape


EXPORT_STYLES = """
body {
  font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
  line-height: 1.6;
  max-width: 800px;
  margin: 0 auto;
  padding: 2rem;
  color: #333;
}

pre {
  background: #f4f4f4;
  padding: 1rem;
  border-radius: 4px;
  overflow-x: auto;
}

code {
  font-family: source-code-pro, Menlo, Monaco, Consolas, "Courier New", monospace;
  font-size: 0.9em;
  background: #f4f4f4;
  padding: 0.2em 0.4em;
  border-radius: 3px;
}

pre code {
  padding: 0;
  background: transparent;
}

.output {
  margin-top: 0.5rem;
  padding: 1rem;
  border: 1px solid #ddd;
  border-radius: 4px;
  background: #fff;
}

.output img, figure.subfigure img {
  max-width: 100%;
}

figure.subfigure[data-layout="horizontal"] {
  display: flex;
  gap: 1rem;
}

blockquote {
  border-left: 4px solid #ddd;
  margin: 0;
  padding-left: 1rem;
  color: #666;
}

table {
  border-collapse: collapse;
  width: 100%;
  margin: 1rem 0;
}

td, th {
  border: 1px solid #ddd;
  padding: 0.5rem;
  text-align: left;
}

th {
  background: #f9f9f9;
}

.math-block {
  text-align: center;
  margin: 1rem 0;
  overflow-x: auto;
}

.math-error {
  font-family: monospace;
}

h1, h2, h3, h4, h5, h6 {
  margin-top: 2rem;
}

a {
  color: #007bff;
  text-decoration: none;
}

a:hover {
  text-decoration: underline;
}

/* Custom blocks */
.theorem {
  border: 1px solid #e0e0e0;
  border-radius: 4px;
  padding: 1rem;
  margin: 1rem 0;
  background: #fafafa;
}

.theorem-header {
  font-weight: bold;
  margin-bottom: 0.5rem;
}

.theorem-content {
  font-style: italic;
}

.citation-reference {
  font-size: 0.8em;
  vertical-align: super;
}

.bibliography-block {
  margin-top: 2rem;
  padding-top: 2rem;
  border-top: 2px solid #eee;
}

.bibliography-list {
  list-style: none;
  padding: 0;
}

.bibliography-item {
  margin-bottom: 0.5rem;
}

.nota-data-table th {
  background-color: #f9f9f9;
}

.confusion-matrix-table {
  border-collapse: collapse;
  width: auto;
  margin: 1rem auto;
}

.confusion-matrix-table td, .confusion-matrix-table th {
  border: 1px solid #ccc;
  padding: 8px;
  text-align: center;
}

.confusion-matrix-cell-high { background-color: #d1fae5; }
.confusion-matrix-cell-low { background-color: #fee2e2; }

.pipeline-placeholder, .mermaid-placeholder {
  border: 1px dashed #ccc;
  padding: 2rem;
  text-align: center;
  background: #f9f9f9;
  margin: 1rem 0;
  color: #666;
}

.mermaid-placeholder pre {
  text-align: left;
}

.drawio-placeholder {
  border: 1px solid #ccc;
  padding: 1rem;
  background: #f0f0f0;
  text-align: center;
}
"""


def render_page(title: str, body_html: str, stylesheet_url: str) -> str:
    """Wrap rendered body HTML in a complete standalone page; an empty stylesheet_url links nothing."""
    title = escape(title)
    stylesheet = f'\n    <link rel="stylesheet" href="{escape(stylesheet_url, quote=True)}">' if stylesheet_url else ''
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>{stylesheet}
    <style>{EXPORT_STYLES}</style>
</head>
<body>
    <article>
        <h1>{title}</h1>
        {body_html}
    </article>
</body>
</html>
"""
