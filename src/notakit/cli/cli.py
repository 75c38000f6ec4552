"""CLI entrypoint: Typer app definition and command registration"""

import typer

from notakit.cli.commands import check_cmd, convert_cmd, export_cmd, parse_cmd


app = typer.Typer(name="notakit", no_args_is_help=True, help="Markdown block parser and static HTML exporter")

app.command(name="parse")(parse_cmd)
app.command(name="convert")(convert_cmd)
app.command(name="check")(check_cmd)
app.command(name="export")(export_cmd)
