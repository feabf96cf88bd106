from .blockscout_toolkit import BlockscoutToolkit
from .router_activity import RouterActivityScanner, normalize_activity_item
from .routers import (
    DEFAULT_ROUTERS,
    RouterAddresses,
    load_router_overrides,
    merge_routers,
    resolve_router,
    save_router_overrides,
    select_routers_for_network,
)

__all__ = [
    "BlockscoutToolkit",
    "RouterActivityScanner",
    "normalize_activity_item",
    "DEFAULT_ROUTERS",
    "RouterAddresses",
    "load_router_overrides",
    "merge_routers",
    "resolve_router",
    "save_router_overrides",
    "select_routers_for_network",
]
