"""Rename template model and substitution engine."""

import re
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_TEMPLATE = "{date}_{topic}.{ext}"

# Variable the caller fills from the original file, never requested from the model.
EXTENSION_VARIABLE = "ext"

_VARIABLE_PATTERN = re.compile(r"\{([^{}]+)\}")


def _braces_balanced(template_string: str) -> bool:
    """Check that braces pair up without nesting."""
    depth = 0
    for char in template_string:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        if depth not in (0, 1):
            return False
    return depth == 0


def parse_variables(template_string: str) -> list[str]:
    """Return variable names in scan order, duplicates included.

    Templates with unbalanced or nested braces yield no variables.
    """
    if not _braces_balanced(template_string):
        return []
    return _VARIABLE_PATTERN.findall(template_string)


def apply_template(template_string: str, values: Mapping[str, str]) -> str:
    """Substitute ``values`` into every ``{name}`` placeholder.

    Placeholders without a matching key are left as literal text. Substituted values are
    not scanned again, so a value containing ``{...}`` is inserted verbatim.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in values:
            return values[name]
        return match.group(0)

    return _VARIABLE_PATTERN.sub(_replace, template_string)


class RenameTemplate(BaseModel):
    """User-authored naming pattern with ``{variable}`` placeholders."""

    model_config = ConfigDict(frozen=True)

    template_string: str = Field(description="Template text, e.g. '{date}_{topic}.{ext}'")

    def __str__(self) -> str:
        return self.template_string

    @property
    def variable_names(self) -> list[str]:
        """Variable names in the order they appear, duplicates included."""
        return parse_variables(self.template_string)

    @property
    def unique_variable_names(self) -> list[str]:
        """Variable names with duplicates removed, keeping first-occurrence order."""
        return list(dict.fromkeys(self.variable_names))

    def apply(self, values: Mapping[str, str]) -> str:
        """Render the template with the given values."""
        return apply_template(self.template_string, values)
