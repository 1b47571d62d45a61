"""
Transports that deliver a batch to the StatHat EZ API.

Every transport raises a StatHatError subclass when a batch is not accepted
and returns normally otherwise. Retrying is never attempted: a failed batch
is the caller's to log and drop.
"""
import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import List, Optional

import requests
from requests.adapters import HTTPAdapter

from .config import StatHatConfig
from .errors import APIError, SerializationError, StatHatError, TransportError
from .events import APIResponse, Batch

logger = logging.getLogger(__name__)

HEADERS = {'Content-Type': 'application/json'}


def serialize_batch(batch: Batch) -> bytes:
    """
    Encode a batch as the EZ API request body.

    Raises:
        SerializationError: If the batch holds values JSON cannot carry
    """
    try:
        return json.dumps(batch.to_payload(), allow_nan=False).encode('utf-8')
    except (TypeError, ValueError) as e:
        raise SerializationError(f"error json encoding request: {e}") from e


def parse_response(response: requests.Response, batch_size: int) -> APIResponse:
    """
    Decode a StatHat reply and check its status field.

    The JSON status decides success, not the HTTP status code.

    Raises:
        TransportError: If the body is not a valid response
        APIError: If the status is not 200
    """
    try:
        api_response = APIResponse.from_dict(response.json())
    except ValueError as e:
        raise TransportError(
            f"error decoding response (http {response.status_code}): {e}"
        ) from e
    if not api_response.ok:
        raise APIError(api_response.status, api_response.msg, batch_size)
    return api_response


class Transport(ABC):
    """Sends a serialized batch and reports success or failure."""

    def __init__(self, config: StatHatConfig):
        self.config = config

    @property
    def timeout(self):
        return (self.config.connect_timeout, self.config.read_timeout)

    @abstractmethod
    def send(self, batch: Batch) -> Optional[APIResponse]:
        """
        Deliver a batch.

        Args:
            batch (Batch): The batch to send

        Returns:
            APIResponse: The decoded reply, when there is one

        Raises:
            StatHatError: If the batch was not accepted
        """
        pass

    def close(self) -> None:
        """Release any held resources."""
        pass

    def _log_result(self, batch: Batch, api_response: APIResponse) -> None:
        if self.config.debug:
            logger.info("stathat: api response for %d items: %s", len(batch), api_response)


class HTTPTransport(Transport):
    """
    Pooled HTTP transport.

    One requests.Session is shared by every flush. Its adapter keeps at most
    max_connections connections to the collector and blocks further requests
    until one is free.
    """

    def __init__(self, config: StatHatConfig, session: Optional[requests.Session] = None):
        super().__init__(config)
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=1,
                pool_maxsize=config.max_connections,
                pool_block=True,
            )
            session.mount('http://', adapter)
            session.mount('https://', adapter)
        self.session = session

    def send(self, batch: Batch) -> APIResponse:
        body = serialize_batch(batch)
        if self.config.debug:
            logger.info("stathat: request: %s", body.decode('utf-8'))
        try:
            response = self.session.post(
                self.config.endpoint,
                data=body,
                headers=HEADERS,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"error posting {len(batch)} items: {e}") from e
        try:
            api_response = parse_response(response, len(batch))
        finally:
            response.close()
        self._log_result(batch, api_response)
        return api_response

    def close(self) -> None:
        self.session.close()


class DirectTransport(Transport):
    """Unpooled transport making a fresh connection for each batch."""

    def send(self, batch: Batch) -> APIResponse:
        body = serialize_batch(batch)
        if self.config.debug:
            logger.info("stathat: request: %s", body.decode('utf-8'))
        try:
            response = requests.post(
                self.config.endpoint,
                data=body,
                headers=HEADERS,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"error posting {len(batch)} items: {e}") from e
        api_response = parse_response(response, len(batch))
        self._log_result(batch, api_response)
        return api_response


class LoggingTransport(Transport):
    """Dry-run transport that logs each batch instead of sending it."""

    def send(self, batch: Batch) -> None:
        body = serialize_batch(batch)
        logger.info("DRY RUN: Would send %d items to %s: %s",
                    len(batch), self.config.endpoint, body.decode('utf-8'))


class MemoryTransport(Transport):
    """
    In-memory transport recording every batch it is given.

    Set `error` to make sends fail with that exception after recording the
    attempt. `sent` only holds batches that succeeded.
    """

    def __init__(self, config: Optional[StatHatConfig] = None, error: Optional[StatHatError] = None):
        super().__init__(config or StatHatConfig(transport='memory'))
        self.error = error
        self.attempts: List[Batch] = []
        self.sent: List[Batch] = []
        self.closed = False
        self._lock = threading.Lock()
        self._sent_event = threading.Condition(self._lock)

    def send(self, batch: Batch) -> None:
        serialize_batch(batch)
        with self._lock:
            self.attempts.append(batch)
            self._sent_event.notify_all()
            if self.error is not None:
                raise self.error
            self.sent.append(batch)

    def wait_for_attempts(self, n: int, timeout: float = 5.0) -> bool:
        """Block until at least n sends were attempted."""
        with self._lock:
            return self._sent_event.wait_for(lambda: len(self.attempts) >= n, timeout)

    def close(self) -> None:
        self.closed = True


TRANSPORTS = {
    'pooled': HTTPTransport,
    'direct': DirectTransport,
    'dry-run': LoggingTransport,
    'memory': MemoryTransport,
}


def create_transport(config: StatHatConfig) -> Transport:
    """
    Build the transport named by config.transport.

    Args:
        config (StatHatConfig): Backend configuration

    Returns:
        Transport: A new transport
    """
    try:
        transport_class = TRANSPORTS[config.transport]
    except KeyError:
        raise ValueError(f"unknown transport: {config.transport}") from None
    return transport_class(config)
