"""JSON-RPC envelope, request handling and fan-out to calculation modules.

A calculation module is a remote endpoint that runs one voting system. The
aggregating service keeps a ModuleRegistry of them, sends the same vote data
to all of them concurrently and merges whatever comes back. A module that
errors, times out or replies with garbage is left out of the merged result;
it never fails the whole call.
"""

import asyncio
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Self

import httpx

from liquidvote.calculate import CalculationError, MethodNotFoundError, calculate
from liquidvote.models import VoteData

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

# Seconds to wait for any single module
DEFAULT_TIMEOUT = 30.0


@dataclass
class RPCRequest:
    method: str
    params: Any = field(default_factory=dict)
    id: Any = ""
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        if not isinstance(data, Mapping) or not isinstance(data.get("method"), str):
            raise ValueError("Request must be an object with a string 'method'")
        return cls(
            method=data["method"],
            params=data.get("params", {}),
            id=data.get("id", ""),
            jsonrpc=data.get("jsonrpc", JSONRPC_VERSION),
        )


@dataclass
class RPCResponse:
    id: Any
    result: Any = None
    error: Any = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def is_success(self) -> bool:
        return self.error is None and self.result is not None

    def to_dict(self) -> dict[str, Any]:
        body = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            body["error"] = self.error
        else:
            body["result"] = self.result
        return body

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        if not isinstance(data, Mapping) or "id" not in data:
            raise ValueError("Malformed JSON-RPC response")
        return cls(
            id=data["id"],
            result=data.get("result"),
            error=data.get("error"),
            jsonrpc=data.get("jsonrpc", JSONRPC_VERSION),
        )


def build_request(data: VoteData, method: str, **flags: bool) -> RPCRequest:
    """Wrap vote data in a request whose id is the data's content hash.

    Identical ballots always produce the same id, so the transport can
    deduplicate repeated requests.
    """
    params = data.to_dict()
    params.update(flags)
    return RPCRequest(method=method, params=params, id=data.request_id())


def handle_request(body: Any) -> dict[str, Any]:
    """Answer one JSON-RPC request body with a response body.

    Unknown methods and invalid params come back as error responses rather
    than exceptions.
    """
    try:
        request = RPCRequest.from_dict(body)
    except ValueError as e:
        return RPCResponse(id=None, error=str(e)).to_dict()

    try:
        result = calculate(request.method, request.params)
    except MethodNotFoundError as e:
        return RPCResponse(id=request.id, error=str(e)).to_dict()
    except (CalculationError, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.info("rejected %s request %s: %s", request.method, request.id, e)
        return RPCResponse(id=request.id, error=f"invalid params: {e}").to_dict()

    return RPCResponse(id=request.id, result=result.to_dict()).to_dict()


@dataclass(frozen=True)
class Module:
    """A remote calculation endpoint."""
    name: str
    address: str
    method: str

    @property
    def endpoint(self) -> str:
        return f"{self.address.rstrip('/')}/{self.name}/rpc/"


class ModuleRegistry:
    """Explicit name -> module mapping, owned by whoever runs the service.

    Reads and writes are guarded by a lock so a running service can
    register modules while requests are being fanned out.
    """

    def __init__(self):
        self._modules: dict[str, Module] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_mapping(cls, modules: Mapping[str, str]) -> Self:
        """Build a registry from {name: address}; each method defaults to its name."""
        registry = cls()
        for name, address in modules.items():
            registry.add(name, address)
        return registry

    def add(self, name: str, address: str, method: str | None = None) -> Module:
        module = Module(name=name, address=address, method=method or name)
        with self._lock:
            self._modules[name] = module
        return module

    def remove(self, name: str) -> bool:
        with self._lock:
            return self._modules.pop(name, None) is not None

    def get(self, name: str) -> Module | None:
        with self._lock:
            return self._modules.get(name)

    def items(self) -> list[Module]:
        """Snapshot of the registered modules."""
        with self._lock:
            return list(self._modules.values())

    def to_dict(self) -> dict[str, str]:
        return {module.name: module.address for module in self.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._modules)


async def request_calculation(
    client: httpx.AsyncClient, module: Module, data: VoteData, **flags: bool
) -> Any | None:
    """Ask one module to calculate. Returns its result, or None on any failure."""
    request = build_request(data, module.method, **flags)
    try:
        response = await client.post(module.endpoint, json=request.to_dict())
        response.raise_for_status()
        reply = RPCResponse.from_dict(response.json())
    except httpx.HTTPError as e:
        logger.warning("module %s unreachable: %s", module.name, e)
        return None
    except ValueError as e:
        logger.warning("module %s sent a malformed reply: %s", module.name, e)
        return None

    if not reply.is_success:
        logger.warning("module %s returned an error: %s", module.name, reply.error)
        return None
    return reply.result


async def fan_out(
    registry: ModuleRegistry,
    data: VoteData,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.AsyncClient | None = None,
    **flags: bool,
) -> dict[str, Any]:
    """Send `data` to every registered module at once and merge the replies.

    Returns {module name: result} for the modules that answered
    successfully; failed modules are simply missing.
    """
    modules = registry.items()
    if not modules:
        return {}

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    try:
        replies = await asyncio.gather(*(
            request_calculation(client, module, data, **flags) for module in modules
        ))
    finally:
        if owns_client:
            await client.aclose()

    merged = {
        module.name: reply
        for module, reply in zip(modules, replies)
        if reply is not None
    }
    logger.info("%d of %d modules answered request %s",
                len(merged), len(modules), data.request_id())
    return merged
