"""Lightweight Transmission JSON-RPC client."""

from __future__ import annotations

import base64
import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Union

import requests

from .schema import (
  SUCCESS,
  TORRENT_ADDED,
  TORRENT_DUPLICATE,
  TORRENT_FIELDS,
  AddResult,
  Metainfo,
  Source,
  TMResponse,
  TorrentAddOptions,
  TorrentId,
  TorrentLocation,
  TorrentRemoveOptions,
  as_source,
  unique_fields,
)

LOG = logging.getLogger(__name__)

SESSION_HEADER = "X-Transmission-Session-Id"


class TransmissionError(RuntimeError):
  """Base error for Transmission communication problems."""


class TransportError(TransmissionError):
  """Raised when the daemon cannot be reached or answers with a non-JSON body."""


class SessionRenewalError(TransportError):
  """Raised when the daemon keeps rejecting the session token after a renewal."""


class MalformedResponseError(TransmissionError):
  """Raised when a successful reply does not have the shape its method promises."""


class TransmissionClient:
  """Minimal wrapper around Transmission's JSON-RPC endpoint."""

  def __init__(
    self,
    host: str,
    port: int,
    base_path: str = "/transmission/",
    *,
    scheme: str = "http",
    username: Optional[str] = None,
    password: Optional[str] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
  ) -> None:
    self.endpoint = f"{scheme}://{host}:{port}{base_path}rpc"
    self.timeout = timeout
    self._session = session or requests.Session()
    if username is not None:
      self._session.auth = (username, password or "")
    self._session_id: Optional[str] = None
    self._renew_lock = threading.Lock()

  @property
  def session_id(self) -> Optional[str]:
    """Session token sent with every request; ``None`` until the first probe."""
    return self._session_id

  @session_id.setter
  def session_id(self, value: Optional[str]) -> None:
    self._session_id = value

  # ---------------------------------------------------------------------------
  # Public helpers
  # ---------------------------------------------------------------------------
  def probe_session(self) -> Optional[str]:
    """Fetch the endpoint once to harvest a fresh session token."""
    try:
      response = self._session.get(self.endpoint, timeout=self.timeout)
    except requests.RequestException as exc:
      raise TransportError(f"Failed to reach Transmission: {exc}") from exc

    session_id = response.headers.get(SESSION_HEADER)
    if session_id:
      self._session_id = session_id
      LOG.debug("Obtained Transmission session id.")
    else:
      LOG.debug("Transmission probe returned no session id (status %s).", response.status_code)
    return self._session_id

  def invoke(self, method: str, arguments: Dict[str, Any], tag: Optional[int] = None) -> Dict[str, Any]:
    """Send one RPC call and return the decoded envelope as-is."""
    payload: Dict[str, Any] = {"method": method, "arguments": arguments}
    if tag is not None:
      payload["tag"] = tag

    sent_with = self._session_id
    response = self._post(payload, sent_with)
    if response.status_code == 409:
      LOG.debug("Transmission rejected session id for %s; renewing.", method)
      self._renew_session(sent_with)
      response = self._post(payload, self._session_id)
      if response.status_code == 409:
        raise SessionRenewalError(f"Transmission rejected the renewed session id for {method}.")

    return self._decode(response)

  def add_torrent(
    self,
    source: Union[Source, str, bytes],
    options: Optional[TorrentAddOptions] = None,
    *,
    tag: Optional[int] = None,
  ) -> TMResponse[Optional[AddResult]]:
    """Add a torrent from a location the daemon can fetch or from raw metainfo."""
    source = as_source(source)
    arguments = (options or TorrentAddOptions()).to_wire()
    if isinstance(source, TorrentLocation):
      arguments["filename"] = source.location
    elif isinstance(source, Metainfo):
      arguments["metainfo"] = base64.b64encode(source.data).decode("ascii")

    envelope = self.invoke("torrent-add", arguments, tag)
    result = envelope.get("result")
    if result != SUCCESS:
      return TMResponse(result=result, arguments=None, tag=envelope.get("tag"))
    return TMResponse(
      result=result,
      arguments=_parse_add_arguments(envelope.get("arguments")),
      tag=envelope.get("tag"),
    )

  def remove_torrent(
    self,
    options: TorrentRemoveOptions,
    *,
    tag: Optional[int] = None,
  ) -> TMResponse[Dict[str, Any]]:
    envelope = self.invoke("torrent-remove", options.to_wire(), tag)
    return TMResponse(
      result=envelope.get("result"),
      arguments=envelope.get("arguments") or {},
      tag=envelope.get("tag"),
    )

  def get_torrents(
    self,
    fields: Iterable[str],
    ids: Optional[Union[TorrentId, List[TorrentId]]] = None,
    *,
    tag: Optional[int] = None,
  ) -> TMResponse[List[Dict[str, Any]]]:
    """Fetch descriptors restricted to ``fields``; all torrents when ``ids`` is omitted."""
    requested = unique_fields(fields)
    unknown = [name for name in requested if name not in TORRENT_FIELDS]
    if unknown:
      LOG.debug("Requesting fields unknown to this client: %s", ", ".join(unknown))

    arguments: Dict[str, Any] = {"fields": requested}
    if ids is not None:
      arguments["ids"] = ids

    envelope = self.invoke("torrent-get", arguments, tag)
    reply = envelope.get("arguments") or {}
    if not isinstance(reply, dict):
      raise MalformedResponseError(f"torrent-get reply arguments are not an object: {reply!r}")
    torrents = reply.get("torrents") or []
    if not isinstance(torrents, list) or not all(isinstance(item, dict) for item in torrents):
      raise MalformedResponseError(f"torrent-get reply torrents are not a list of objects: {torrents!r}")
    return TMResponse(result=envelope.get("result"), arguments=torrents, tag=envelope.get("tag"))

  # ---------------------------------------------------------------------------
  # Internal helpers
  # ---------------------------------------------------------------------------
  def _renew_session(self, rejected: Optional[str]) -> None:
    with self._renew_lock:
      if self._session_id != rejected:
        # Another caller already renewed while we were waiting.
        return
      self.probe_session()

  def _post(self, payload: Dict[str, Any], session_id: Optional[str]) -> requests.Response:
    headers = {"Content-Type": "application/json"}
    if session_id:
      headers[SESSION_HEADER] = session_id
    try:
      return self._session.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
    except requests.RequestException as exc:
      raise TransportError(f"Transmission request failed: {exc}") from exc

  def _decode(self, response: requests.Response) -> Dict[str, Any]:
    try:
      data = response.json()
    except ValueError as exc:
      raise TransportError(
        f"Invalid JSON from Transmission (status {response.status_code}): {exc}"
      ) from exc
    if not isinstance(data, dict):
      raise TransportError(f"Unexpected reply from Transmission: {data!r}")
    return data


def _parse_add_arguments(arguments: Any) -> AddResult:
  if arguments is None:
    arguments = {}
  if not isinstance(arguments, dict):
    raise MalformedResponseError(f"torrent-add reply arguments are not an object: {arguments!r}")
  for response_type in (TORRENT_ADDED, TORRENT_DUPLICATE):
    descriptor = arguments.get(response_type)
    if descriptor is None:
      continue
    if not isinstance(descriptor, dict):
      raise MalformedResponseError(f"torrent-add {response_type!r} is not an object: {descriptor!r}")
    return AddResult.from_descriptor(response_type, descriptor)
  raise MalformedResponseError(
    f"torrent-add reply has neither {TORRENT_ADDED!r} nor {TORRENT_DUPLICATE!r}: {arguments!r}"
  )


__all__ = [
  "MalformedResponseError",
  "SESSION_HEADER",
  "SessionRenewalError",
  "TransmissionClient",
  "TransmissionError",
  "TransportError",
]
