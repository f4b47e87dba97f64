"""Argument bags, response types and wire helpers for the Transmission RPC."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, TypeVar, Union

SUCCESS = "success"
TORRENT_ADDED = "torrent-added"
TORRENT_DUPLICATE = "torrent-duplicate"

TORRENT_FIELDS = frozenset(
  {
    "activityDate",
    "addedDate",
    "availability",
    "bandwidthPriority",
    "comment",
    "corruptEver",
    "creator",
    "dateCreated",
    "desiredAvailable",
    "doneDate",
    "downloadDir",
    "downloadedEver",
    "downloadLimit",
    "downloadLimited",
    "editDate",
    "error",
    "errorString",
    "eta",
    "etaIdle",
    "file-count",
    "files",
    "fileStats",
    "group",
    "hashString",
    "haveUnchecked",
    "haveValid",
    "honorsSessionLimits",
    "id",
    "isFinished",
    "isPrivate",
    "isStalled",
    "labels",
    "leftUntilDone",
    "magnetLink",
    "manualAnnounceTime",
    "maxConnectedPeers",
    "metadataPercentComplete",
    "name",
    "peer-limit",
    "peers",
    "peersConnected",
    "peersFrom",
    "peersGettingFromUs",
    "peersSendingToUs",
    "percentComplete",
    "percentDone",
    "pieces",
    "pieceCount",
    "pieceSize",
    "priorities",
    "primary-mime-type",
    "queuePosition",
    "rateDownload",
    "rateUpload",
    "recheckProgress",
    "secondsDownloading",
    "secondsSeeding",
    "seedIdleLimit",
    "seedIdleMode",
    "seedRatioLimit",
    "seedRatioMode",
    "sequentialDownload",
    "sizeWhenDone",
    "startDate",
    "status",
    "trackers",
    "trackerList",
    "trackerStats",
    "totalSize",
    "torrentFile",
    "uploadedEver",
    "uploadLimit",
    "uploadLimited",
    "uploadRatio",
    "wanted",
    "webseeds",
    "webseedsSendingToUs",
  }
)

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

T = TypeVar("T")
TorrentId = Union[int, str]


def to_wire_key(name: str) -> str:
  """Convert ``download_dir`` or ``downloadDir`` to ``download-dir``."""
  spaced = _WORD_BOUNDARY.sub("-", name)
  return spaced.replace("_", "-").lower()


def to_wire_arguments(values: Mapping[str, Any]) -> Dict[str, Any]:
  """Hyphen-case every key and drop the ones left unset."""
  return {to_wire_key(key): value for key, value in values.items() if value is not None}


def unique_fields(fields: Iterable[str]) -> List[str]:
  if isinstance(fields, (str, bytes)):
    raise TypeError("fields must be a collection of field names, not a single string")
  seen = set()
  deduped: List[str] = []
  for name in fields:
    if name in seen:
      continue
    seen.add(name)
    deduped.append(name)
  return deduped


# --------------------------------------------------------------------------- #
# Torrent sources
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class TorrentLocation:
  """URL, magnet link or daemon-side path the daemon should fetch itself."""

  location: str


@dataclass(frozen=True)
class Metainfo:
  """Raw ``.torrent`` file contents."""

  data: bytes


Source = Union[TorrentLocation, Metainfo]


def as_source(value: Union[Source, str, bytes]) -> Source:
  if isinstance(value, (TorrentLocation, Metainfo)):
    return value
  if isinstance(value, str):
    return TorrentLocation(value)
  if isinstance(value, (bytes, bytearray)):
    return Metainfo(bytes(value))
  raise TypeError(f"Unsupported torrent source type: {type(value).__name__}")


# --------------------------------------------------------------------------- #
# Request argument bags
# --------------------------------------------------------------------------- #
@dataclass
class TorrentAddOptions:
  cookies: Optional[str] = None
  download_dir: Optional[str] = None
  labels: Optional[List[str]] = None
  paused: Optional[bool] = None
  peer_limit: Optional[int] = None
  bandwidth_priority: Optional[int] = None
  files_wanted: Optional[List[int]] = None
  files_unwanted: Optional[List[int]] = None
  priority_high: Optional[List[int]] = None
  priority_low: Optional[List[int]] = None
  priority_normal: Optional[List[int]] = None

  def to_wire(self) -> Dict[str, Any]:
    return to_wire_arguments(asdict(self))


@dataclass
class TorrentRemoveOptions:
  ids: Union[TorrentId, List[TorrentId]]
  delete_local_data: Optional[bool] = None

  def to_wire(self) -> Dict[str, Any]:
    return to_wire_arguments(asdict(self))


# --------------------------------------------------------------------------- #
# Responses
# --------------------------------------------------------------------------- #
@dataclass
class TMResponse(Generic[T]):
  """Decoded RPC envelope. ``result`` is passed through from the daemon."""

  result: str
  arguments: T
  tag: Optional[int] = None

  @property
  def succeeded(self) -> bool:
    return self.result == SUCCESS


@dataclass
class AddResult:
  response_type: str
  id: int
  name: str
  hash_string: str

  @classmethod
  def from_descriptor(cls, response_type: str, descriptor: Mapping[str, Any]) -> "AddResult":
    return cls(
      response_type=response_type,
      id=descriptor.get("id"),
      name=descriptor.get("name"),
      hash_string=descriptor.get("hashString"),
    )

  @property
  def is_duplicate(self) -> bool:
    return self.response_type == TORRENT_DUPLICATE

  def to_dict(self) -> Dict[str, Any]:
    return {
      "responseType": self.response_type,
      "id": self.id,
      "name": self.name,
      "hashString": self.hash_string,
    }


__all__ = [
  "AddResult",
  "Metainfo",
  "SUCCESS",
  "Source",
  "TMResponse",
  "TORRENT_ADDED",
  "TORRENT_DUPLICATE",
  "TORRENT_FIELDS",
  "TorrentAddOptions",
  "TorrentId",
  "TorrentLocation",
  "TorrentRemoveOptions",
  "as_source",
  "to_wire_arguments",
  "to_wire_key",
  "unique_fields",
]
