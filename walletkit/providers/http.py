"""HTTP ledger providers for walletkit."""

import asyncio
import json
import logging
from typing import Any, Mapping, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

from ..constants import API_ENDPOINTS, DEFAULT_TIMEOUT, USER_AGENT, Network
from ..exceptions import APIError, NetworkError, ProviderError, ValidationError
from ..providers.base import LedgerProvider
from ..utils.encoding import hex_to_bytes

__all__ = ["HTTPProvider", "JSONRPCProvider"]

logger = logging.getLogger(__name__)


class _AiohttpProvider(LedgerProvider):
    """Session management shared by the aiohttp-backed providers."""
    
    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[ClientSession] = None,
        proxy: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__()
        self.timeout = ClientTimeout(total=timeout)
        self.proxy = proxy
        self.headers = {
            "User-Agent": USER_AGENT,
            **(headers or {}),
        }
        self._session = session
        self._owns_session = session is None
        
    async def connect(self) -> None:
        """Initialize HTTP session."""
        if self._session is None:
            self._session = ClientSession(timeout=self.timeout, headers=self.headers)
        self._logger.info(f"Connected {self!r}")
        
    async def disconnect(self) -> None:
        """Close HTTP session."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None
        self._logger.info("Disconnected from provider")
        
    @property
    def is_connected(self) -> bool:
        return self._session is not None and not self._session.closed
        
    async def _ensure_session(self) -> ClientSession:
        if not self.is_connected:
            await self.connect()
        return self._session


class HTTPProvider(_AiohttpProvider):
    """
    Esplora REST provider (mempool.space, litecoinspace.org, blockstream.info).
    
    Raw transactions are read from ``GET {endpoint}/tx/{txid}/hex``.
    """
    
    def __init__(
        self,
        endpoint: Optional[str] = None,
        endpoints: Optional[Mapping[Network, str]] = None,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[ClientSession] = None,
        proxy: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        api_key: Optional[str] = None,
        api_key_header: str = "X-Mempool-Auth",
    ) -> None:
        """
        Initialize HTTP provider.
        
        Args:
            endpoint: API base URL used for every network
            endpoints: Per-network base URLs (defaults to ``API_ENDPOINTS``)
            timeout: Request timeout in seconds
            session: Existing aiohttp session to use
            proxy: Proxy URL for requests
            headers: Additional headers for requests
            api_key: API key for authenticated endpoints
            api_key_header: Header carrying ``api_key``
        """
        headers = dict(headers or {})
        if api_key:
            headers[api_key_header] = api_key
        super().__init__(timeout=timeout, session=session, proxy=proxy, headers=headers)
        
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.endpoints = dict(endpoints if endpoints is not None else API_ENDPOINTS)
        
    def endpoint_for(self, network: Network) -> str:
        """Base URL serving ``network``."""
        if self.endpoint:
            return self.endpoint
        try:
            return self.endpoints[network].rstrip("/")
        except KeyError:
            raise ProviderError(f"No endpoint configured for {network.value}") from None
            
    async def fetch_transaction(self, network: Network, tx_hash: str) -> Optional[bytes]:
        url = f"{self.endpoint_for(network)}/tx/{tx_hash}/hex"
        session = await self._ensure_session()
        
        try:
            self._logger.debug(f"Request: GET {url}")
            async with session.get(url, proxy=self.proxy) as response:
                self._logger.debug(f"Response: {response.status}")
                text = await response.text()
                
                if response.status == 404:
                    return None
                if response.status >= 500:
                    raise NetworkError(f"Server error {response.status}: {text}")
                if response.status >= 400:
                    raise APIError(f"Client error {response.status}: {text}", code=response.status)
                    
        except asyncio.TimeoutError as e:
            raise NetworkError("Request timed out") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network error: {e}") from e
            
        try:
            return hex_to_bytes(text.strip())
        except ValidationError as e:
            raise ProviderError(f"Invalid transaction hex for {tx_hash}") from e
            
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(endpoint={self.endpoint or 'default'})"


class JSONRPCProvider(_AiohttpProvider):
    """
    Node JSON-RPC provider calling ``getrawtransaction``.
    
    ``endpoint`` may contain a ``{coin}`` placeholder which is replaced by
    the lower-case coin code of the requested network, for gateways that
    expose one URL per chain.
    """
    
    def __init__(
        self,
        endpoint: str,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[ClientSession] = None,
        proxy: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
        api_key: Optional[str] = None,
        api_key_header: str = "X-API-KEY",
    ) -> None:
        headers = {"Content-Type": "application/json", **(headers or {})}
        if api_key:
            headers[api_key_header] = api_key
        super().__init__(timeout=timeout, session=session, proxy=proxy, headers=headers)
        
        self.endpoint = endpoint
        self._request_id = 0
        
    def endpoint_for(self, network: Network) -> str:
        return self.endpoint.replace("{coin}", network.coin_type.value.lower())
        
    async def call(self, network: Network, method: str, params: list[Any]) -> Any:
        """
        Perform one JSON-RPC call and return its ``result``.
        
        Raises:
            APIError: If the node answers with an error object or HTTP error
            NetworkError: On transport failure
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }
        url = self.endpoint_for(network)
        session = await self._ensure_session()
        
        try:
            self._logger.debug(f"Request: POST {url} method={method}")
            async with session.post(url, data=json.dumps(payload), proxy=self.proxy) as response:
                self._logger.debug(f"Response: {response.status}")
                text = await response.text()
                if response.status >= 500 and not text:
                    raise NetworkError(f"Server error {response.status}")
                    
        except asyncio.TimeoutError as e:
            raise NetworkError("Request timed out") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network error: {e}") from e
            
        try:
            body = json.loads(text)
        except json.JSONDecodeError as e:
            raise APIError(f"Invalid JSON response ({response.status}): {text[:200]}") from e
            
        error = body.get("error") if isinstance(body, dict) else None
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise APIError(f"RPC error: {message}", code=code, data=error)
        if response.status >= 400:
            raise APIError(f"HTTP error {response.status}: {text[:200]}", code=response.status)
        if not isinstance(body, dict) or "result" not in body:
            raise APIError("RPC response has no result", data=body)
            
        return body["result"]
        
    async def fetch_transaction(self, network: Network, tx_hash: str) -> Optional[bytes]:
        result = await self.call(network, "getrawtransaction", [tx_hash])
        if result is None:
            return None
        if not isinstance(result, str):
            raise ProviderError(f"Unexpected getrawtransaction result for {tx_hash}")
        try:
            return hex_to_bytes(result)
        except ValidationError as e:
            raise ProviderError(f"Invalid transaction hex for {tx_hash}") from e
            
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(endpoint={self.endpoint})"
