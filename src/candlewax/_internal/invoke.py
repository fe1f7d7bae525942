"""Call sync or async controller actions uniformly.

Actions can be ``def`` or ``async def``. The router awaits either
through this one helper::

    outcome = await invoke(controller.view_action, slug)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
