"""Template discovery and rendering.

Templates are rendered with Jinja2 against ``{"Values": <value tree>}``.
The variable delimiters are configurable (``{{,}}`` by default); block tags
keep Jinja's ``{% %}``.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError, TemplateSyntaxError, Undefined

from helmlet.exceptions import TemplateRenderError

logger = logging.getLogger(__name__)

DEFAULT_DELIMITER = "{{,}}"
DEFAULT_SUFFIXES = (".yaml", ".yml", ".tpl")


def parse_delimiters(delimiter: str) -> tuple[str, str]:
    """Split a ``start,end`` delimiter setting into a pair.

    Raises:
        ValueError: Unless there are exactly two non-empty parts.

    Examples:
        >>> parse_delimiters("[[,]]")
        ('[[', ']]')
    """
    parts = delimiter.split(",")
    if len(parts) != 2 or not all(parts):
        raise ValueError(
            f"delimiter must be two non-empty strings separated by a comma, got {delimiter!r}"
        )
    return parts[0], parts[1]


def build_context(values: Mapping[str, Any]) -> dict[str, Any]:
    """Wrap the value tree in the context templates are rendered against."""
    return {"Values": values}


# Helpers exposed to templates


def default(default_value: Any, value: Any) -> Any:
    """Return `default_value` when `value` is null or undefined."""
    if value is None or isinstance(value, Undefined):
        return default_value
    return value


def quote(value: Any) -> str:
    """Double-quote a value, escaping as needed."""
    return json.dumps(str(value), ensure_ascii=False)


def indent(spaces: int, text: str) -> str:
    """Pad every line of `text`, the first one included."""
    pad = " " * spaces
    return pad + text.replace("\n", "\n" + pad)


def files_get(path: str) -> str:
    """Return a file's contents, or a YAML comment describing the error.

    Invalid UTF-8 is replaced with U+FFFD, as in :func:`read_template`.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        logger.warning("FilesGet could not read %s: %s", path, e)
        return f"# {e}"
    return data.decode("utf-8", errors="replace")


def read_template(path: Path) -> str:
    """Read a template file as text.

    Bytes that are not valid UTF-8 are replaced with U+FFFD rather than
    failing the render.
    """
    data = path.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Converted %s to UTF-8", path)
        return data.decode("utf-8", errors="replace")


def find_templates(
    directory: Path,
    suffixes: Iterable[str] = DEFAULT_SUFFIXES,
) -> list[Path]:
    """Find template files under `directory`, recursively, in sorted order."""
    suffixes = tuple(suffixes)
    return sorted(
        path
        for path in directory.rglob("*")
        if path.is_file() and path.name.endswith(suffixes)
    )


def output_path_for(template: Path, output_dir: Path) -> Path:
    """Where a template's output goes when writing into a directory."""
    return output_dir / template.name


def write_output(path: Path, text: str) -> None:
    """Write rendered text as UTF-8."""
    path.write_text(text, encoding="utf-8")


class Renderer:
    """Renders templates with a fixed delimiter pair and strictness.

    In strict mode, referencing a missing key is an error. Otherwise it
    renders as an empty string.
    """

    def __init__(
        self,
        delimiters: tuple[str, str] = ("{{", "}}"),
        strict: bool = False,
    ) -> None:
        start, end = delimiters
        self.strict = strict
        self.env = Environment(
            variable_start_string=start,
            variable_end_string=end,
            undefined=StrictUndefined if strict else Undefined,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.globals.update(
            tpl=self.tpl,
            default=default,
            quote=quote,
            indent=indent,
            FilesGet=files_get,
        )
        self.env.filters["quote"] = quote

    def tpl(self, text: str, data: Mapping[str, Any]) -> str:
        """Render `text` as a template against `data` (a mapping)."""
        return self.env.from_string(text).render(data)

    def render_string(self, text: str, context: Mapping[str, Any]) -> str:
        return self.env.from_string(text).render(context)

    def render_file(self, path: Path, context: Mapping[str, Any]) -> str:
        """Render a template file.

        Args:
            path: The template file.
            context: The render context, see build_context().

        Returns:
            The rendered text.

        Raises:
            TemplateRenderError: If the file can't be read, parsed or executed.
        """
        try:
            text = read_template(path)
        except OSError as e:
            raise TemplateRenderError(path, "reading", e) from e

        try:
            template = self.env.from_string(text)
        except TemplateSyntaxError as e:
            raise TemplateRenderError(path, "parsing", e) from e

        try:
            return template.render(context)
        except (TemplateError, TypeError, ValueError) as e:
            raise TemplateRenderError(path, "executing", e) from e
