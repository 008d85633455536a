import logging
from datetime import datetime, timezone

# Load environment variables FIRST
from amazon_ads import config

from starlette.requests import Request
from starlette.responses import JSONResponse

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger('amazon_ads_server')

from mcp_instance import mcp  # noqa: E402
from tools import TOOLS  # noqa: E402  (registers tools and resources)

# Server startup
logger.info("Starting Amazon Ads MCP Server...")


@mcp.custom_route("/health", methods=["GET"])
async def health(request: Request) -> JSONResponse:
    """Liveness probe; does not contact Amazon."""
    return JSONResponse({
        "status": "healthy",
        "service": config.SERVICE_NAME,
        "version": config.SERVER_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@mcp.custom_route("/", methods=["GET"])
async def index(request: Request) -> JSONResponse:
    return JSONResponse({
        "name": config.SERVICE_NAME,
        "version": config.SERVER_VERSION,
        "description": "MCP server for Amazon Advertising API integration",
        "endpoints": {
            "health": "/health",
            "mcp": "/mcp",
        },
        "tools": [tool.name for tool in TOOLS],
    })


if __name__ == "__main__":
    import sys

    # Check command line arguments for transport mode
    if "--http" in sys.argv:
        logger.info(f"Starting with HTTP transport on http://{config.MCP_HTTP_HOST}:{config.MCP_HTTP_PORT}/mcp")
        mcp.run(transport="streamable-http", host=config.MCP_HTTP_HOST, port=config.MCP_HTTP_PORT, path="/mcp")
    else:
        # Default to STDIO for Claude Desktop compatibility
        logger.info("Starting with STDIO transport for Claude Desktop")
        mcp.run(transport="stdio")
