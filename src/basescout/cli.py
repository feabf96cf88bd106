"""Command line entry point.

Usage:
    python -m basescout routers [print]
    python -m basescout routers get aerodrome_v2
    python -m basescout routers set my_router --network base-mainnet --address 0x...
    python -m basescout call get_account_summary --args '{"address": "0x..."}'
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from basescout.config import SUPPORTED_NETWORKS, BasescoutConfig, load_config
from basescout.core.logging_config import setup_logging
from basescout.exceptions import BasescoutError, ConfigurationError
from basescout.toolkits.data.blockscout_toolkit import BlockscoutToolkit
from basescout.toolkits.data.routers import (
    DEFAULT_ROUTERS,
    RouterAddresses,
    RouterMap,
    RouterOverride,
    load_router_overrides,
    merge_routers,
    save_router_overrides,
    select_routers_for_network,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="basescout", description="Base network explorer tools")
    parser.add_argument('--config', type=str, help='Path to a YAML configuration file')
    parser.add_argument('--log-level', type=str, help='Override the configured log level')

    subparsers = parser.add_subparsers(dest="command", required=True)
    routers = subparsers.add_parser("routers", help="Show or edit known DEX routers")
    routers.add_argument("action", nargs="?", choices=["print", "get", "set"], default="print")
    routers.add_argument("name", nargs="?", help="Router name for get/set")
    routers.add_argument("--network", choices=SUPPORTED_NETWORKS, help="Network to update with set")
    routers.add_argument("--address", type=str, help="Router address to store with set")

    call = subparsers.add_parser("call", help="Run one tool and print its JSON result")
    call.add_argument("tool", type=str, help="Tool name, e.g. get_account_summary")
    call.add_argument("--args", type=str, default="{}", help="Tool arguments as a JSON object")
    return parser


async def _run(config: BasescoutConfig, tool_name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
    toolkit = BlockscoutToolkit(config=config)
    try:
        tool = toolkit.get_tool(tool_name)
        return await tool(**arguments)
    finally:
        await toolkit.aclose()


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, default=str) + "\n")


def _configuration_error(error: Exception) -> int:
    _emit({"success": False, "message": str(error), "error_type": "configuration_error"})
    return 2


def _load_routers(config: BasescoutConfig) -> Tuple[Dict[str, RouterOverride], RouterMap]:
    overrides = None
    if config.routers_config_path:
        overrides = load_router_overrides(config.routers_config_path)
    return overrides or {}, merge_routers(DEFAULT_ROUTERS, overrides)


def _get_router(config: BasescoutConfig, name: Optional[str]) -> int:
    if not name:
        _emit({"success": False, "message": "routers get needs a router name", "error_type": "validation_error"})
        return 2

    _, merged = _load_routers(config)
    network = config.explorer.network
    address = select_routers_for_network(merged, network).get(name)
    if address is None:
        _emit({
            "success": False,
            "message": f"Router '{name}' not found on {network}",
            "error_type": "unknown_router",
        })
        return 1

    _emit({"success": True, "data": {name: address}, "network": network})
    return 0


def _set_router(config: BasescoutConfig, name: Optional[str], network: Optional[str], address: Optional[str]) -> int:
    if not config.routers_config_path:
        return _configuration_error(ConfigurationError("ROUTERS_CONFIG_PATH must be set to use routers set"))
    if not (name and network and address):
        _emit({
            "success": False,
            "message": "routers set needs a name, --network and --address",
            "error_type": "validation_error",
        })
        return 2

    overrides, merged = _load_routers(config)
    # only routers already overridden are written back, with both networks filled
    updated: RouterMap = {key: merged[key] for key in overrides}
    current = merged.get(name) or RouterAddresses(mainnet=address, sepolia=address)
    updated[name] = RouterAddresses(
        mainnet=address if network == "base-mainnet" else current.mainnet,
        sepolia=address if network == "base-sepolia" else current.sepolia,
    )
    save_router_overrides(config.routers_config_path, updated)
    logger.info(f"Saved {len(updated)} router override(s) to {config.routers_config_path}")

    _emit({
        "success": True,
        "message": f"Updated router {name} for {network}",
        "data": updated[name].model_dump(),
    })
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        if args.log_level:
            data = config.model_dump()
            data["logging"]["level"] = args.log_level
            config = BasescoutConfig.from_dict(data)
    except (BasescoutError, FileNotFoundError) as e:
        return _configuration_error(e)

    setup_logging(config.logging)

    if args.command == "routers":
        try:
            if args.action == "get":
                return _get_router(config, args.name)
            if args.action == "set":
                return _set_router(config, args.name, args.network, args.address)
        except ConfigurationError as e:
            return _configuration_error(e)
        tool_name, arguments = "list_routers", {}
    else:
        tool_name = args.tool
        try:
            arguments = json.loads(args.args)
        except ValueError as e:
            _emit({"success": False, "message": f"--args is not valid JSON: {e}", "error_type": "validation_error"})
            return 2
        if not isinstance(arguments, dict):
            _emit({"success": False, "message": "--args must be a JSON object", "error_type": "validation_error"})
            return 2

    try:
        result = asyncio.run(_run(config, tool_name, arguments))
    except ConfigurationError as e:
        return _configuration_error(e)
    except KeyError as e:
        _emit({"success": False, "message": str(e.args[0]), "error_type": "unknown_tool"})
        return 2
    except TypeError as e:
        logger.debug(f"Bad arguments for {tool_name}: {e}")
        _emit({"success": False, "message": f"Invalid arguments for '{tool_name}': {e}", "error_type": "validation_error"})
        return 2

    _emit(result)
    return 0 if result.get("success") else 1


if __name__ == '__main__':
    sys.exit(main())
