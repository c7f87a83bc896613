#!/usr/bin/env python3
"""
Safety Center Config MCP Server — validation and inspection of Safety Center
configuration XML files.

Provides tools to validate a config against a resource table, list its groups
and sources, and resolve individual string references, plus MCP resources for
config file discovery.
"""

from __future__ import annotations

import json
import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Sequence

from defusedxml import DefusedXmlException
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Resource, TextContent, Tool

from safetycenter.models import ID_NULL, SafetyCenterConfig
from safetycenter.parser import MAX_FILE_SIZE_BYTES, ParseError, parse_file, parse_reference
from safetycenter.resources import MappingResourceTable, load_resource_table
from safetycenter.safe_xml import safe_root_tag

logger = logging.getLogger("safety-center-mcp")

server = Server("safety-center-mcp")
CONFIG_DIR = os.environ.get("SAFETY_CENTER_CONFIG_DIR", os.getcwd())
DEFAULT_RESOURCES = os.environ.get("SAFETY_CENTER_RESOURCES", "")
DEFAULT_PACKAGE = os.environ.get("SAFETY_CENTER_PACKAGE", "")

# Maximum size of any user-provided file (config XML or resource JSON); same as the parser's
MAX_FILE_SIZE = MAX_FILE_SIZE_BYTES


# ============================================================================
# SECURITY UTILITIES
# ============================================================================

def _validate_filepath(filepath: str, allowed_extensions: tuple[str, ...] | None = None) -> str:
    """Validate a user-provided file path against traversal and size attacks.

    Raises:
        ValueError: For invalid paths (null bytes, bad extensions, oversized).
        FileNotFoundError: When the resolved path does not exist.
    """
    if '\x00' in filepath:
        raise ValueError("Invalid file path: null byte detected")

    resolved = Path(filepath).resolve()

    if not resolved.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    if not resolved.is_file():
        raise ValueError(f"Not a regular file: {filepath}")

    if allowed_extensions and resolved.suffix.lower() not in allowed_extensions:
        raise ValueError(
            f"Invalid file type '{resolved.suffix}'. "
            f"Allowed: {', '.join(allowed_extensions)}"
        )

    if resolved.stat().st_size > MAX_FILE_SIZE:
        size_mb = resolved.stat().st_size / (1024 * 1024)
        raise ValueError(f"File too large ({size_mb:.1f} MB). Maximum: {MAX_FILE_SIZE // (1024 * 1024)} MB")

    return str(resolved)


def _validate_directory(directory: str) -> str:
    """Validate a user-provided directory path.

    Raises:
        ValueError: For invalid paths (null bytes, not a directory).
    """
    if '\x00' in directory:
        raise ValueError("Invalid directory path: null byte detected")

    resolved = Path(directory).resolve()

    if not resolved.is_dir():
        raise ValueError(f"Not a valid directory: {directory}")

    return str(resolved)


# ============================================================================
# UTILITIES
# ============================================================================

def find_config_files(directory: str) -> list[str]:
    """Find all XML files under a directory whose root is a Safety Center config."""
    configs = []
    for f in sorted(Path(directory).rglob("*.xml")):
        try:
            with f.open("rb") as handle:
                root_tag = safe_root_tag(handle)
        except (OSError, ET.ParseError, DefusedXmlException):
            continue
        if root_tag == "safety-center-config":
            configs.append(str(f))
    return configs


def format_res_id(res_id: int) -> str:
    """Format a resource id the way aapt prints it."""
    return f"0x{res_id:08x}" if res_id != ID_NULL else "-"


def format_error(error: BaseException) -> str:
    """Render an error and its chain of causes, outermost first."""
    parts = []
    current: BaseException | None = error
    while current is not None:
        parts.append(str(current))
        current = current.__cause__
    return "\n  caused by: ".join(parts)


def _load_resources(arguments: dict) -> tuple[str, MappingResourceTable]:
    """Return (package name, resource table) for a tool call."""
    resources_path = arguments.get("resources") or DEFAULT_RESOURCES
    if not resources_path:
        raise ValueError("No resource table given and SAFETY_CENTER_RESOURCES is not set")
    table = load_resource_table(_validate_filepath(resources_path, ('.json',)))
    package = arguments.get("package_name") or DEFAULT_PACKAGE
    if not package:
        if len(table.packages) != 1:
            raise ValueError("package_name is required when the resource table holds "
                             f"{len(table.packages)} packages")
        package = table.packages[0]
    return package, table


def _parse_config(arguments: dict) -> SafetyCenterConfig:
    """Parse and validate the config named by a tool call."""
    filepath = _validate_filepath(arguments["filepath"], ('.xml',))
    package, table = _load_resources(arguments)
    return parse_file(filepath, package, table)


# ============================================================================
# MCP RESOURCES — File discovery
# ============================================================================

@server.list_resources()
async def list_resources() -> list[Resource]:
    """Expose discovered Safety Center configs as MCP resources."""
    resources = []
    for f in find_config_files(CONFIG_DIR):
        p = Path(f)
        resources.append(Resource(
            uri=f"file://{f}",
            name=p.stem,
            description=f"Safety Center config: {p.name}",
            mimeType="application/xml",
        ))
    return resources


@server.read_resource()
async def read_resource(uri: str) -> str:
    """Read a config file and return a validation summary."""
    filepath = str(uri).replace("file://", "")
    try:
        config = _parse_config({"filepath": filepath})
    except (ParseError, ValueError, FileNotFoundError) as e:
        return format_error(e)
    return f"""Safety Center Config: {Path(filepath).name}
Groups: {len(config.safety_sources_groups)}
Sources: {len(config.safety_sources)}
Path: {filepath}"""


# ============================================================================
# TOOLS
# ============================================================================

_CONFIG_PROPERTIES = {
    "filepath": {"type": "string", "description": "Path to the Safety Center config XML"},
    "resources": {"type": "string", "description": "Path to the resource table JSON (default: $SAFETY_CENTER_RESOURCES)"},
    "package_name": {"type": "string", "description": "Package holding the config's resources"},
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="list_configs",
            description="List Safety Center config XML files in a directory",
            inputSchema={
                "type": "object",
                "properties": {
                    "directory": {"type": "string", "description": "Directory to search (default: $SAFETY_CENTER_CONFIG_DIR)"}
                }
            }
        ),
        Tool(
            name="validate_config",
            description="Parse and validate a Safety Center config, reporting the first error and its causes",
            inputSchema={
                "type": "object",
                "properties": dict(_CONFIG_PROPERTIES),
                "required": ["filepath"]
            }
        ),
        Tool(
            name="list_groups",
            description="List the safety sources groups of a config in display order",
            inputSchema={
                "type": "object",
                "properties": dict(_CONFIG_PROPERTIES),
                "required": ["filepath"]
            }
        ),
        Tool(
            name="list_sources",
            description="List all safety sources with their type, package and profile",
            inputSchema={
                "type": "object",
                "properties": {
                    **_CONFIG_PROPERTIES,
                    "group_id": {"type": "string", "description": "Only list sources of this group"},
                },
                "required": ["filepath"]
            }
        ),
        Tool(
            name="describe_source",
            description="Show every field of one safety source as JSON",
            inputSchema={
                "type": "object",
                "properties": {
                    **_CONFIG_PROPERTIES,
                    "source_id": {"type": "string"},
                },
                "required": ["filepath", "source_id"]
            }
        ),
        Tool(
            name="resolve_reference",
            description="Resolve a single @string/ reference against a resource table",
            inputSchema={
                "type": "object",
                "properties": {
                    "reference": {"type": "string", "description": "e.g. @string/lock_screen_title"},
                    "resources": _CONFIG_PROPERTIES["resources"],
                    "package_name": _CONFIG_PROPERTIES["package_name"],
                },
                "required": ["reference"]
            }
        ),
    ]


# ============================================================================
# TOOL HANDLERS
# ============================================================================

async def handle_list_configs(arguments: dict) -> Sequence[TextContent]:
    directory = arguments.get("directory", CONFIG_DIR)
    files = find_config_files(_validate_directory(directory))
    if not files:
        return [TextContent(type="text", text=f"No Safety Center configs found in {directory}")]
    return [TextContent(type="text", text=f"Found {len(files)} config(s):\n" + "\n".join(f"  - {f}" for f in files))]


async def handle_validate_config(arguments: dict) -> Sequence[TextContent]:
    try:
        config = _parse_config(arguments)
    except ParseError as e:
        return [TextContent(type="text", text=f"Invalid config: {format_error(e)}")]
    return [TextContent(type="text", text=(
        f"Config valid: {len(config.safety_sources_groups)} group(s), "
        f"{len(config.safety_sources)} source(s)"
    ))]


async def handle_list_groups(arguments: dict) -> Sequence[TextContent]:
    config = _parse_config(arguments)
    result = "# Safety Sources Groups\n\n| # | Id | Title | Summary | Icon | Sources |\n|---|----|-------|---------|------|---------|\n"
    for i, g in enumerate(config.safety_sources_groups, 1):
        result += (f"| {i} | {g.id} | {format_res_id(g.title_res_id)} | {format_res_id(g.summary_res_id)} "
                   f"| {g.stateless_icon_type.name.lower()} | {len(g.safety_sources)} |\n")
    return [TextContent(type="text", text=result)]


async def handle_list_sources(arguments: dict) -> Sequence[TextContent]:
    config = _parse_config(arguments)
    group_id = arguments.get("group_id")
    if group_id:
        group = config.find_group(group_id)
        if group is None:
            raise ValueError(f"Group not found: {group_id}")
        groups = [group]
    else:
        groups = list(config.safety_sources_groups)
    result = "# Safety Sources\n\n| Group | Id | Type | Package | Profile | Intent Action |\n|-------|----|------|---------|---------|---------------|\n"
    for g in groups:
        for s in g.safety_sources:
            result += (f"| {g.id} | {s.id} | {s.type.name.lower()} | {s.package_name or '-'} "
                       f"| {s.profile.name.lower()} | {s.intent_action or '-'} |\n")
    return [TextContent(type="text", text=result)]


async def handle_describe_source(arguments: dict) -> Sequence[TextContent]:
    config = _parse_config(arguments)
    source = config.find_source(arguments["source_id"])
    if source is None:
        raise ValueError(f"Source not found: {arguments['source_id']}")
    return [TextContent(type="text", text=json.dumps(source.to_dict(), indent=2))]


async def handle_resolve_reference(arguments: dict) -> Sequence[TextContent]:
    package, table = _load_resources(arguments)
    reference = arguments["reference"]
    try:
        res_id = parse_reference(reference, package, table, "reference", "value")
    except ParseError as e:
        return [TextContent(type="text", text=str(e))]
    return [TextContent(type="text", text=f"{reference} -> {format_res_id(res_id)} ({package})")]


# ============================================================================
# TOOL DISPATCH
# ============================================================================

TOOL_HANDLERS = {
    "list_configs": handle_list_configs,
    "validate_config": handle_validate_config,
    "list_groups": handle_list_groups,
    "list_sources": handle_list_sources,
    "describe_source": handle_describe_source,
    "resolve_reference": handle_resolve_reference,
}


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> Sequence[TextContent]:
    handler = TOOL_HANDLERS.get(name)
    if not handler:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]
    try:
        return await handler(arguments)
    except FileNotFoundError as e:
        return [TextContent(type="text", text=f"File not found: {e}")]
    except ValueError as e:
        return [TextContent(type="text", text=f"Validation error: {format_error(e)}")]
    except Exception as e:
        logger.exception("Error in tool %s", name)
        return [TextContent(type="text", text=f"Error: {type(e).__name__}")]


# ============================================================================
# MAIN
# ============================================================================

async def main():
    logging.basicConfig(level=logging.INFO)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main_sync():
    """Synchronous entry point for use as a console script."""
    import asyncio
    asyncio.run(main())


if __name__ == "__main__":
    main_sync()
