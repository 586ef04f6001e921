"""
mcpkit - Claude desktop MCP server setup
Main entry point for running the setup wizard from a source checkout.
"""

from mcpkit.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
