from planka_mcp.cli import main

main()
