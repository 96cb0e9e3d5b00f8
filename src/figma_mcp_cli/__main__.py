"""Allow ``python -m figma_mcp_cli``."""

from figma_mcp_cli.cli import main

raise SystemExit(main())
