"""ATS-specific adapters for form filling.

Each ATS platform has its own form structure, selectors and confirmation
mechanism. Adapters encapsulate that platform-specific logic behind the
shared ``ATSAdapter`` contract.

Importing this package registers the bundled adapters; import order is
detection order.
"""

from ats_autofill.automation.adapters.base import ATSAdapter
from ats_autofill.automation.adapters.registry import AdapterRegistry

# Import adapters to register them
from ats_autofill.automation.adapters import (  # noqa: F401, E402
    acme,
    globex,
    tsent,
    dropr,
)

__all__ = [
    "ATSAdapter",
    "AdapterRegistry",
]
