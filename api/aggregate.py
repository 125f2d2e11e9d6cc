"""Vercel serverless function that fans a topic out to calculation modules."""

import asyncio
import json
import os
import sys
from pathlib import Path

# Add the project root to the path so we can import liquidvote modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.rpc import create_response
from liquidvote.models import Topic
from liquidvote.rpc import ModuleRegistry, fan_out

# JSON object mapping module name -> base address
MODULES_ENV_VAR = "VOTE_MODULES"


def load_registry() -> ModuleRegistry:
    """Build the module registry from the VOTE_MODULES environment variable."""
    raw = os.environ.get(MODULES_ENV_VAR, "{}")
    modules = json.loads(raw)
    if not isinstance(modules, dict):
        raise ValueError(f"{MODULES_ENV_VAR} must be a JSON object")
    return ModuleRegistry.from_mapping(modules)


def handler(request):
    """Handle incoming requests to aggregate a topic.

    Accepts:
    - GET: list the configured calculation modules
    - POST with JSON body: a topic {"title", "delegates", "options", "votes"}

    Returns JSON mapping each module that answered to its result. Modules
    that fail are left out.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    try:
        registry = load_registry()
    except ValueError as e:
        return create_response(
            {"error": f"Bad module configuration: {e}"},
            status=500,
        )

    if request.method == "GET":
        return create_response(registry.to_dict())

    if request.method != "POST":
        return create_response(
            {"error": "Method not allowed. Use GET or POST."},
            status=405,
        )

    try:
        body = json.loads(request.body.decode("utf-8"))
        topic = Topic.from_dict(body)
        data = topic.to_vote_data()

        result = asyncio.run(fan_out(registry, data))

        return create_response(result)

    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except (ValueError, KeyError, AttributeError) as e:
        return create_response(
            {"error": f"Invalid topic: {e}"},
            status=400,
        )
    except Exception as e:
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )
