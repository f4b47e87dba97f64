"""Transmission JSON-RPC client helpers."""

from .client import (
  MalformedResponseError,
  SESSION_HEADER,
  SessionRenewalError,
  TransmissionClient,
  TransmissionError,
  TransportError,
)
from .schema import (
  AddResult,
  Metainfo,
  Source,
  TMResponse,
  TORRENT_ADDED,
  TORRENT_DUPLICATE,
  TORRENT_FIELDS,
  TorrentAddOptions,
  TorrentLocation,
  TorrentRemoveOptions,
  as_source,
  to_wire_key,
  unique_fields,
)

__all__ = [
  "AddResult",
  "MalformedResponseError",
  "Metainfo",
  "SESSION_HEADER",
  "SessionRenewalError",
  "Source",
  "TMResponse",
  "TORRENT_ADDED",
  "TORRENT_DUPLICATE",
  "TORRENT_FIELDS",
  "TorrentAddOptions",
  "TorrentLocation",
  "TorrentRemoveOptions",
  "TransmissionClient",
  "TransmissionError",
  "TransportError",
  "as_source",
  "to_wire_key",
  "unique_fields",
]
