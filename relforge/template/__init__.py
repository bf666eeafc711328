"""Template rendering for release inputs (version, semver line, branch name)."""

from relforge.template.engine import (
    ActionTemplateRenderer,
    TemplateError,
    TemplateFunction,
    TemplateRenderer,
)
from relforge.template.functions import DEFAULT_FUNCTIONS

__all__ = [
    "ActionTemplateRenderer",
    "DEFAULT_FUNCTIONS",
    "TemplateError",
    "TemplateFunction",
    "TemplateRenderer",
]
