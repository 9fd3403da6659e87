"""
Manual test harness for the learn_mcp stdio server.

Launches the server as a subprocess and plays the message sequence an MCP
host sends: initialize, tools/call for learn_mcp, then the deprecated
tools/invoke variant (expected to come back as "Method not found").
Everything the server writes is echoed with [STDOUT]/[STDERR] prefixes.

Usage:
    lambda-mcp-harness                      # default server and topic
    lambda-mcp-harness security             # specific topic
    lambda-mcp-harness --server "python my_server.py" examples
"""
import sys
import json
import time
import shlex
import argparse
import threading
import subprocess
from typing import IO, Any, Dict, List

DEFAULT_TOPIC = "architecture"
DEFAULT_SERVER_COMMAND = [sys.executable, "-m", "lambda_mcp_client"]

# ANSI Colors
GREEN = "\033[92m"
RED = "\033[91m"
BLUE = "\033[94m"
RESET = "\033[0m"


def build_initialize_request(req_id: int = 0) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": req_id,
        "method": "initialize",
        "params": {
            "protocolVersion": "2024-11-05",
            "capabilities": {},
            "clientInfo": {
                "name": "test-client",
                "version": "0.1.0"
            }
        }
    }


def build_tool_request(topic: str, req_id: int, method: str = "tools/call") -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": req_id,
        "method": method,
        "params": {
            "name": "learn_mcp",
            "arguments": {
                "topic": topic
            }
        }
    }


def build_script(topic: str) -> List[Dict[str, Any]]:
    """The scripted conversation, in send order."""
    return [
        build_initialize_request(0),
        build_tool_request(topic, 1),
        build_tool_request(topic, 2, method="tools/invoke"),
    ]


def _pump(stream: IO[str], label: str, color: str) -> None:
    for line in stream:
        print(f"{color}[{label}]:{RESET} {line.rstrip()}", flush=True)


def run_harness(command: List[str], topic: str, delay: float = 1.0) -> int:
    """Run the script against a server subprocess; returns the server's exit code."""
    print(f"Testing MCP server: {' '.join(command)}")
    print(f"Using topic: {topic}")

    process = subprocess.Popen(
        command,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
    )
    pumps = [
        threading.Thread(target=_pump, args=(process.stdout, "STDOUT", GREEN), daemon=True),
        threading.Thread(target=_pump, args=(process.stderr, "STDERR", RED), daemon=True),
    ]
    for pump in pumps:
        pump.start()

    try:
        for message in build_script(topic):
            print(f"\n{BLUE}Sending {message['method']} request...{RESET}", flush=True)
            process.stdin.write(json.dumps(message) + "\n")
            process.stdin.flush()
            # Give the server time to answer before the next message
            time.sleep(delay)
    finally:
        # Closing stdin ends the server's read loop
        process.stdin.close()

    returncode = process.wait()
    for pump in pumps:
        pump.join()

    print(f"\nTest completed (server exit code {returncode}).")
    return returncode


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Exercise the learn_mcp stdio server with a scripted MCP session'
    )
    parser.add_argument(
        'topic',
        nargs='?',
        default=DEFAULT_TOPIC,
        help=f'Topic passed to learn_mcp (default: {DEFAULT_TOPIC})'
    )
    parser.add_argument(
        '--server',
        type=shlex.split,
        default=DEFAULT_SERVER_COMMAND,
        help='Command that starts the server (default: python -m lambda_mcp_client)'
    )
    parser.add_argument(
        '--delay',
        type=float,
        default=1.0,
        help='Seconds to wait after each message (default: 1.0)'
    )
    args = parser.parse_args(argv)

    try:
        run_harness(args.server, args.topic, delay=args.delay)
    except (OSError, subprocess.SubprocessError) as e:
        print(f"{RED}Error:{RESET} {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
