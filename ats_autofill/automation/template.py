"""``{{name}}`` placeholder substitution for cover letters and messages."""

import re
from collections.abc import Mapping

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def render_template(text: str, values: Mapping[str, str]) -> str:
    """Replace ``{{key}}`` tokens with ``values[key]``.

    Unknown keys are left verbatim.
    """

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        return values[key] if key in values else match.group(0)

    return _PLACEHOLDER.sub(_sub, text)
