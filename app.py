"""
Simple Flask web server that mimics a minimalist Google-style home page and
hands submitted torrent URLs or uploaded .torrent files to Transmission.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Optional, Union

from flask import (
  Flask,
  Request,
  Response,
  current_app,
  jsonify,
  render_template_string,
  request,
)

from config import AppConfig, TransmissionConfig, load_config
from tmclient import (
  MalformedResponseError,
  Metainfo,
  SessionRenewalError,
  Source,
  TorrentLocation,
  TorrentRemoveOptions,
  TransmissionClient,
  TransmissionError,
  TransportError,
)

LOG = logging.getLogger(__name__)


TEMPLATE = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Torrent Drop</title>
    <style>
      body { font-family: sans-serif; max-width: 40rem; margin: 4rem auto; padding: 0 1rem; }
      form { display: grid; gap: 0.75rem; }
      input[type="text"] { font-size: 1.1rem; padding: 0.6rem 0.9rem; }
      .message { margin-top: 1rem; }
      .message.error { color: #b3261e; }
    </style>
  </head>
  <body>
    <main>
      <div class="container">
        <h1>Torrent Drop</h1>
        <form method="post" action="/submit" enctype="multipart/form-data">
          <input type="text" name="url" placeholder="Paste a torrent URL or magnet link" />
          <input type="file" name="torrent" accept=".torrent" />
          <button type="submit">Send</button>
        </form>
        {% if message %}
        <div class="message{% if error %} error{% endif %}">{{ message }}</div>
        {% endif %}
      </div>
    </main>
  </body>
</html>
"""


def create_app(
  config: AppConfig | None = None,
  *,
  client_factory: Callable[[TransmissionConfig], TransmissionClient] | None = None,
) -> Flask:
  config = config or load_config()
  app = Flask(__name__)
  app.config["SECRET_KEY"] = config.secret_key
  app.config["APP_CONFIG"] = config
  factory = client_factory or _build_transmission_client
  app.extensions["tm_client"] = factory(config.transmission)

  @app.get("/")
  def home() -> str:
    return render_template_string(TEMPLATE, message=None)

  @app.post("/submit")
  def submit() -> Response | str:
    client: TransmissionClient = current_app.extensions["tm_client"]

    source = _source_from_request(request)
    if source is None:
      return _reply(request, "Please provide a torrent URL or a .torrent file.", 400)

    try:
      response = client.add_torrent(source)
    except SessionRenewalError as exc:
      return _reply(request, f"Transmission kept rejecting the session: {exc}", 502)
    except TransportError as exc:
      return _reply(request, f"Transmission is unreachable: {exc}", 503)
    except MalformedResponseError as exc:
      return _reply(request, f"Unexpected reply from Transmission: {exc}", 502)

    if not response.succeeded:
      LOG.warning("Transmission refused torrent: %s", response.result)
      return _reply(request, f"Transmission refused the torrent: {response.result}", 422)

    added = response.arguments
    if added.is_duplicate:
      message = f"Torrent '{added.name}' is already present (id {added.id})."
      status_code = 200
    else:
      message = f"Torrent '{added.name}' added as id {added.id}."
      status_code = 201
    return _reply(request, message, status_code, torrent=added.to_dict())

  @app.get("/torrents")
  def list_torrents() -> Response:
    cfg: AppConfig = current_app.config["APP_CONFIG"]
    client: TransmissionClient = current_app.extensions["tm_client"]

    fields = _split_csv(request.args.get("fields", "")) or list(cfg.list_fields)
    ids = [_parse_id(value) for value in _split_csv(request.args.get("ids", ""))] or None

    try:
      response = client.get_torrents(fields, ids)
    except TransmissionError as exc:
      return jsonify({"error": f"Transmission request failed: {exc}"}), 503

    if not response.succeeded:
      return jsonify({"error": response.result}), 422
    return jsonify({"torrents": response.arguments})

  @app.delete("/torrents/<torrent_id>")
  def remove_torrent(torrent_id: str) -> Response:
    client: TransmissionClient = current_app.extensions["tm_client"]
    delete_data = request.args.get("delete_data", "0").strip().lower() in {"1", "true", "yes", "on"}

    try:
      response = client.remove_torrent(
        TorrentRemoveOptions(ids=[_parse_id(torrent_id)], delete_local_data=delete_data)
      )
    except TransmissionError as exc:
      return jsonify({"error": f"Transmission request failed: {exc}"}), 503

    if not response.succeeded:
      return jsonify({"error": response.result}), 422
    return jsonify({"result": response.result})

  return app


def _build_transmission_client(tm_cfg: TransmissionConfig) -> TransmissionClient:
  return TransmissionClient(
    tm_cfg.host,
    tm_cfg.port,
    tm_cfg.base_path,
    scheme=tm_cfg.scheme,
    username=tm_cfg.username,
    password=tm_cfg.password,
    timeout=tm_cfg.timeout,
  )


def _source_from_request(req: Request) -> Optional[Source]:
  upload = req.files.get("torrent")
  if upload and upload.filename:
    data = upload.read()
    if data:
      return Metainfo(data)

  url = req.form.get("url", "").strip()
  if url:
    return TorrentLocation(url)
  return None


def _split_csv(raw: str) -> List[str]:
  return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_id(value: str) -> Union[int, str]:
  """Numeric ids stay ints; anything else is treated as an info hash."""
  return int(value) if value.isdigit() else value


def _wants_json(req: Request) -> bool:
  accept_header = req.headers.get("Accept", "")
  return "application/json" in accept_header.lower()


def _reply(req: Request, message: str, status_code: int, **extra: Any):
  if _wants_json(req):
    payload: Dict[str, Any] = {"message": message, **extra}
    if status_code >= 400:
      payload = {"error": message}
    return jsonify(payload), status_code
  return render_template_string(TEMPLATE, message=message, error=status_code >= 400), status_code


app = create_app()


if __name__ == "__main__":
  logging.basicConfig(level=app.config["APP_CONFIG"].log_level)
  app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "8080")), debug=False)
