"""Vercel serverless function serving JSON-RPC calculation requests."""

import json
import sys
from pathlib import Path

# Add the project root to the path so we can import liquidvote modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from liquidvote.rpc import handle_request


def handler(request):
    """Handle incoming JSON-RPC calculation requests.

    Accepts:
    - POST with JSON body: {"jsonrpc": "2.0", "id": ..., "method": "liquid",
      "params": {"delegates": [...], "options": [...], "votes": {...}}}

    Returns the JSON-RPC response; unknown methods and bad params are
    reported in its "error" member.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    if request.method != "POST":
        return create_response(
            {"error": "Method not allowed. Use POST."},
            status=405,
        )

    try:
        body = json.loads(request.body.decode("utf-8"))
        return create_response(handle_request(body))

    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except Exception as e:
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
