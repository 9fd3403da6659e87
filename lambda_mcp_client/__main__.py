import sys

from lambda_mcp_client.main import main

sys.exit(main())
