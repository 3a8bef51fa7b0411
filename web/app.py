from __future__ import annotations

import json
import logging
from pathlib import Path
import sys

from flask import abort, Flask, jsonify, request, Response

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from pydantic import ValidationError

from core.diagram_sizes import list_sizes
from core.themes import list_themes
from formatting.raster_preview import to_png
from formatting.svg_builder import to_svg
from renderers.engine import DiagramEngine

logger = logging.getLogger(__name__)

engine = DiagramEngine()
app = Flask(__name__)


def _header_text(value: str) -> str:
    # JSON string escaping keeps CR/LF and non-latin-1 characters out of the header
    return json.dumps(value)[1:-1]


@app.route("/render", methods=["POST"])
def render():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object describing one diagram.")

    try:
        scene = engine.render_payload(payload)
    except ValidationError as exc:
        abort(400, description=f"Invalid diagram request: {exc.error_count()} error(s)")

    fmt = (request.args.get("format") or "svg").lower()
    if fmt == "png":
        response = Response(to_png(scene), mimetype="image/png")
    elif fmt == "svg":
        response = Response(to_svg(scene), mimetype="image/svg+xml")
    else:
        abort(400, description=f"Unsupported format '{fmt}'.")

    if scene.warnings:
        # JSON array of the warning strings
        response.headers["X-Diagram-Warnings"] = json.dumps(scene.warnings)
    response.headers["X-Diagram-Id"] = _header_text(scene.id or "")
    return response


@app.route("/themes", methods=["GET"])
def themes():
    return jsonify(list_themes())


@app.route("/sizes", methods=["GET"])
def sizes():
    return jsonify(list_sizes())


@app.route("/shapes", methods=["GET"])
def shapes():
    return jsonify({shape: engine.family_of(shape) for shape in engine.shapes()})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True, port=5000)
