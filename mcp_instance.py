"""Shared FastMCP instance the tool modules register against."""
from fastmcp import FastMCP

mcp = FastMCP("Amazon Ads Tools")
