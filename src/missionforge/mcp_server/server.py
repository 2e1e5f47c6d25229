from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from missionforge.logger_manager import setup_logger
from missionforge.mcp_server.tools_generate import generate_work_order, list_providers
from missionforge.settings import settings

mcp = FastMCP("missionforge")

mcp.tool()(generate_work_order)
mcp.tool()(list_providers)


def main():
    # fail at startup rather than on every tool call
    settings.validate()
    # stdout carries the stdio protocol, so logs go to stderr and file only
    setup_logger()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
