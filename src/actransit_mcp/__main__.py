from actransit_mcp.server import main

main()
