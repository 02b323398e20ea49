"""Template rendering utilities."""

import logging
import re
from typing import Any, List, Tuple, Union
from jinja2 import Environment, BaseLoader, StrictUndefined, TemplateError


logger = logging.getLogger(__name__)

_VERSION_CHUNK = re.compile(r"(\d+)")


class StringTemplateLoader(BaseLoader):
    """Template loader for string templates."""

    def __init__(self, template_string: str):
        self.template_string = template_string

    def get_source(self, environment, template):
        return self.template_string, None, lambda: True


def render_template(template_str: str, **context: Any) -> str:
    """Render a Jinja2 template string with given context."""
    try:
        # Guest files must keep their final newline and fail loudly on typos
        env = Environment(
            loader=StringTemplateLoader(template_str),
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

        template = env.get_template("")

        return template.render(**context)

    except TemplateError as e:
        logger.error(f"Template rendering error: {e}")
        raise


def version_key(name: str) -> List[Tuple[int, Union[int, str]]]:
    """Natural sort key comparing embedded numbers numerically, like `sort -V`."""
    key = []
    for chunk in _VERSION_CHUNK.split(name):
        if not chunk:
            continue
        if chunk.isdigit():
            key.append((1, int(chunk)))
        else:
            key.append((0, chunk))
    return key
