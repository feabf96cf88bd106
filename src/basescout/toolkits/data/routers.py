"""Known DEX router contracts on Base.

Overrides live in a YAML or JSON file (``ROUTERS_CONFIG_PATH``) mapping a
router name to its ``mainnet``/``sepolia`` addresses. Overrides may add new
routers or replace one network's address of an existing router.
"""

import json
from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from loguru import logger
from pydantic import BaseModel, Field, RootModel, ValidationError

from basescout.exceptions import ConfigurationError

__all__ = [
    "RouterAddresses",
    "RouterOverride",
    "RouterMap",
    "DEFAULT_ROUTERS",
    "select_routers_for_network",
    "merge_routers",
    "load_router_overrides",
    "save_router_overrides",
    "resolve_router",
]

_UNDEPLOYED = "0x0000000000000000000000000000000000000000"


class RouterAddresses(BaseModel):
    mainnet: str = Field(min_length=1)
    sepolia: str = Field(min_length=1)


class RouterOverride(BaseModel):
    mainnet: Optional[str] = Field(default=None, min_length=1)
    sepolia: Optional[str] = Field(default=None, min_length=1)


class RouterOverrideFile(RootModel[Dict[str, RouterOverride]]):
    pass


RouterMap = Dict[str, RouterAddresses]

DEFAULT_ROUTERS: RouterMap = {
    "uniswap_v3": RouterAddresses(
        mainnet="0xE592427A0AEce92De3Edee1F18E0157C05861564",
        sepolia=_UNDEPLOYED,
    ),
    "aerodrome_v2": RouterAddresses(
        mainnet="0xC5cf4D1AA5CfaF47010AC094d2Eac45B42C4B9c4",
        sepolia=_UNDEPLOYED,
    ),
    "pancakeswap_v3": RouterAddresses(
        mainnet="0x6DD655f4dF4A2E80bA1a95B2c98b1EB2D646b2A2",
        sepolia=_UNDEPLOYED,
    ),
}


def select_routers_for_network(routers: RouterMap, network: str) -> Dict[str, str]:
    """Flatten a router map to ``{name: address}`` for one network."""
    use_sepolia = network == "base-sepolia"
    return {
        name: addresses.sepolia if use_sepolia else addresses.mainnet
        for name, addresses in routers.items()
    }


def merge_routers(base: RouterMap, overrides: Optional[Dict[str, RouterOverride]] = None) -> RouterMap:
    """Overlay ``overrides`` onto ``base``. Missing network addresses fall back to ``base``."""
    if not overrides:
        return dict(base)

    merged = dict(base)
    for name, override in overrides.items():
        current = base.get(name)
        mainnet = override.mainnet or (current.mainnet if current else "")
        sepolia = override.sepolia or (current.sepolia if current else "")
        if not mainnet or not sepolia:
            raise ConfigurationError(
                f"Router '{name}' needs both mainnet and sepolia addresses",
                context={"router": name},
            )
        merged[name] = RouterAddresses(mainnet=mainnet, sepolia=sepolia)
    return merged


def load_router_overrides(path: Union[str, Path]) -> Optional[Dict[str, RouterOverride]]:
    """Read router overrides from a YAML/JSON file.

    Returns None when the file does not exist.

    Raises:
        ConfigurationError: If the file is not valid YAML/JSON or has the wrong shape
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No router overrides at {path}")
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        overrides = RouterOverrideFile.model_validate(raw or {}).root
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid router overrides file {path}: {e}", cause=e)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid router overrides in {path}: {e}", cause=e)

    logger.info(f"Loaded {len(overrides)} router override(s) from {path}")
    return overrides


def save_router_overrides(path: Union[str, Path], routers: RouterMap) -> None:
    payload = {name: addresses.model_dump() for name, addresses in routers.items()}
    Path(path).write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def resolve_router(name_or_address: str, routers: RouterMap, network: str) -> str:
    """Router address for a known router name; anything else is returned as given."""
    key = name_or_address.strip()
    if key in routers:
        return select_routers_for_network({key: routers[key]}, network)[key]
    return key
