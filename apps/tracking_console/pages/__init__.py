"""Pages for the NiceGUI tracking console.

Importing this package registers every ``@ui.page`` route.
"""

from apps.tracking_console.pages import (
    dashboard,  # noqa: F401
    devices,  # noqa: F401
    live_map,  # noqa: F401
    login,  # noqa: F401
    users,  # noqa: F401
)
