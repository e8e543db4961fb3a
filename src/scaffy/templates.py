"""Template rendering for generator paths and file contents."""

from __future__ import annotations

import importlib.util
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment

from .errors import HelperError
from .models import TemplateData

# Stands in for an escaped opening brace while the template is compiled
ESCAPE_SENTINEL = "__SCAFFY_ESCAPED_BRACE__"

# A backslash directly before an opening delimiter: `{{`, `{%` or `{#`
_ESCAPE_PATTERN = re.compile(r"\\\{(?=[{%#])")

_SEPARATOR_PATTERN = re.compile(r"[-_]([a-zA-Z])")


def camelize(value: Any) -> str:
    """Convert kebab-case or snake_case to PascalCase.

    Example:
        >>> camelize("user_account-settings")
        'UserAccountSettings'
    """
    text = _SEPARATOR_PATTERN.sub(lambda m: m.group(1).upper(), str(value))
    return text[:1].upper() + text[1:]


def passthrough(name: Any) -> str:
    """Emit `{{name}}` so a later rendering pass can expand it."""
    return "{{" + str(name) + "}}"


@dataclass(frozen=True)
class RenderResult:
    """Either rendered text, or the raw template text plus the error that
    prevented rendering."""

    text: str
    error: Exception | None = None

    @property
    def rendered(self) -> bool:
        return self.error is None


class Renderer:
    """Jinja2 renderer owning its own helper registry.

    Each instance has a private `Environment`, so helpers registered on one
    renderer are never visible to another.

    A backslash before an opening delimiter escapes it: `\\{{ name }}` renders
    to `{{ name }}`. Backslashes anywhere else are left alone.
    """

    def __init__(self) -> None:
        self.env = Environment(
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._helpers: dict[str, Callable[..., Any]] = {}
        self._log = logging.getLogger("scaffy")

        self.register_helper("camelize", camelize)
        self.register_helper("passthrough", passthrough)

    @property
    def helpers(self) -> list[str]:
        """Names of all registered helpers."""
        return sorted(self._helpers)

    def register_helper(self, name: str, function: Callable[..., Any]) -> None:
        """Expose `function` to templates as a global and as a filter."""
        self._helpers[name] = function
        self.env.globals[name] = function
        self.env.filters[name] = function

    def load_helpers(self, path: Path) -> None:
        """Import a helper module and let it register its helpers.

        The module must define `register(renderer)`.

        Raises:
            HelperError: If the module cannot be imported or has no
                `register` function.
        """
        path = Path(path)
        spec = importlib.util.spec_from_file_location(
            f"scaffy_helpers_{path.parent.name}", path
        )
        if spec is None or spec.loader is None:
            raise HelperError(f"Cannot load helpers from {path}")

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise HelperError(f"Failed to import helpers from {path}: {e}") from e

        register = getattr(module, "register", None)
        if not callable(register):
            raise HelperError(f"Helpers module {path} has no register() function")

        self._log.debug(f"Registering helpers from {path}")
        register(self)

    def render(self, template: str | None, data: TemplateData | Mapping[str, Any]) -> str:
        """Render a template string against template data.

        Raises:
            jinja2.TemplateError: On malformed template syntax.
            Exception: Whatever an expression or helper raises while rendering.
        """
        if not template:
            return ""
        context = data.context() if isinstance(data, TemplateData) else dict(data)
        compiled = self.env.from_string(_ESCAPE_PATTERN.sub(ESCAPE_SENTINEL, template))
        return compiled.render(context).replace(ESCAPE_SENTINEL, "{")

    def try_render(
        self, template: str | None, data: TemplateData | Mapping[str, Any]
    ) -> RenderResult:
        """Render, falling back to the unrendered text on any rendering error.

        This covers malformed syntax as well as exceptions raised while
        evaluating expressions or helpers.
        """
        try:
            return RenderResult(self.render(template, data))
        except Exception as e:
            self._log.debug(f"Render error, keeping raw text: {e!r}")
            return RenderResult(template or "", e)
