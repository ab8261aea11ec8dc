#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
QR Widget - Flask Web Application

Small host for the qrwidget core: a preview page with the status overlay,
SVG/PNG exports and the refresh action.
"""

import base64
import logging
from io import BytesIO
from typing import Optional, Tuple

from flask import Flask, jsonify, render_template_string, request, send_file

from qrwidget import (
    ErrorCorrectionLevel, IconSpec, QRCodeGenerator, QRCodeSize, QRWidgetError,
    RenderConfig, RenderFormat, Status,
)
from qrwidget.errors import ConfigError
from qrwidget.generator import RenderOutput

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TEMPLATE = """
<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>QR Widget</title>
  <style>
    body{font-family:Inter, Arial, sans-serif; padding:18px; background:#fff; color:#222}
    .row{display:flex; flex-wrap:wrap; gap:16px; align-items:flex-end}
    .field{display:flex; flex-direction:column; font-size:14px}
    input[type="text"], select, input[type="number"]{padding:6px 8px; font-family:monospace; border:1px solid #ccc; border-radius:6px}
    .mask{position:absolute; inset:0; display:flex; flex-direction:column; align-items:center; justify-content:center; background:rgba(255,255,255,0.96); gap:8px}
    .error{color:#b00020; margin-top:12px}
    .meta{font-size:13px; color:#555; margin-top:8px}
  </style>
</head>
<body>
  <h2>QR Widget</h2>
  <form method="post" enctype="multipart/form-data">
    <div class="row">
      <div class="field"><label>Text</label><input type="text" name="text" size="48" value="{{ text }}"></div>
      <div class="field"><label>Level</label>
        <select name="level">{% for l in levels %}<option value="{{ l }}" {% if l == level %}selected{% endif %}>{{ l }}</option>{% endfor %}</select>
      </div>
      <div class="field"><label>Format</label>
        <select name="type">
          <option value="svg" {% if fmt == 'svg' %}selected{% endif %}>svg</option>
          <option value="canvas" {% if fmt == 'canvas' %}selected{% endif %}>canvas</option>
        </select>
      </div>
      <div class="field"><label>Status</label>
        <select name="status">{% for s in statuses %}<option value="{{ s }}" {% if s == status %}selected{% endif %}>{{ s }}</option>{% endfor %}</select>
      </div>
      <div class="field"><label>Size</label><input type="text" name="size" value="{{ size }}"></div>
      <div class="field"><label>Color</label><input type="text" name="color" value="{{ color }}"></div>
      <div class="field"><label>Background</label><input type="text" name="bg_color" value="{{ bg_color }}"></div>
      <div class="field"><label>Logo</label><input type="file" name="logo" accept="image/*"></div>
      <button type="submit">Generate</button>
    </div>
  </form>
  {% if error %}<div class="error">{{ error }}</div>{% endif %}
  {% if qr %}
  <div style="margin-top:18px">
    <div class="{{ qr.css_class }}" style="{{ qr.style }}">
      <img src="{{ qr.src }}" width="{{ qr.size }}" height="{{ qr.size }}" alt="QR code">
      {% if qr.overlay.mask %}
      <div class="mask">
        <span>{{ qr.overlay.message }}</span>
        {% if qr.overlay.show_refresh %}
        <form method="post" action="{{ url_for('refresh') }}">
          <input type="hidden" name="text" value="{{ text }}">
          <button type="submit">{{ qr.overlay.refresh_label }}</button>
        </form>
        {% endif %}
      </div>
      {% endif %}
    </div>
    <div class="meta">Version {{ qr.version }}-{{ level }} &middot; {{ qr.side }}x{{ qr.side }} modules &middot; mask {{ qr.mask }}</div>
    {% for w in qr.warnings %}<div class="meta">&#9888; {{ w.message }}</div>{% endfor %}
  </div>
  {% endif %}
</body>
</html>
"""

app = Flask(__name__)
app.config.setdefault('QR_ICON_TIMEOUT', 5.0)
app.config.setdefault('QR_LOCALE', 'en')


def _int_param(values, key: str, default: Optional[int]) -> Optional[int]:
    raw = values.get(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for {key}: {raw!r}")


def _read_icon(req) -> Optional[IconSpec]:
    """Icon from an uploaded 'logo' file or an 'icon' URL / data URL parameter."""
    src = (req.values.get('icon') or "").strip()
    upload = req.files.get('logo')
    if upload is not None and upload.filename:
        data = upload.read()
        mimetype = upload.mimetype or 'image/png'
        src = f"data:{mimetype};base64,{base64.b64encode(data).decode('ascii')}"
        logger.info(f"Logo uploaded: {upload.filename} ({len(data)} bytes)")
    if not src:
        return None

    opacity_raw = req.values.get('icon_opacity')
    try:
        opacity = float(opacity_raw) if opacity_raw else 1.0
    except ValueError:
        raise ConfigError(f"Invalid value for icon_opacity: {opacity_raw!r}")
    excavate_raw = req.values.get('excavate')
    return IconSpec(
        src=src,
        width=_int_param(req.values, 'icon_width', 40),
        height=_int_param(req.values, 'icon_height', 40),
        x=_int_param(req.values, 'icon_x', None),
        y=_int_param(req.values, 'icon_y', None),
        excavate=True if excavate_raw is None else excavate_raw.strip().lower() in ('1', 'true', 'yes', 'on'),
        opacity=opacity,
    )


def _read_params(req) -> Tuple[str, ErrorCorrectionLevel, RenderFormat, Status, RenderConfig, Optional[IconSpec]]:
    """Extract QR generation parameters from a Flask request."""
    text = (req.values.get('text') or "").strip()
    level = ErrorCorrectionLevel.from_str(req.values.get('level'))
    fmt = RenderFormat.from_str(req.values.get('type') or 'svg')
    status = Status.from_str(req.values.get('status'))
    config = RenderConfig.from_mapping(req.values)
    icon = _read_icon(req)
    return text, level, fmt, status, config, icon


def _generate(text: str, level: ErrorCorrectionLevel, fmt: RenderFormat, status: Status,
              config: RenderConfig, icon: Optional[IconSpec]) -> RenderOutput:
    # One generator per request: each page view is its own widget
    generator = QRCodeGenerator(locale=app.config['QR_LOCALE'])
    return generator.generate(
        config, text, level=level, fmt=fmt, icon=icon, status=status,
        on_refresh=lambda: request.values.get('refresh_text') or None,
    )


def _preview_src(output: RenderOutput) -> str:
    if output.raster is not None and not output.raster.wait(app.config['QR_ICON_TIMEOUT']):
        logger.warning("QR icon not ready in time, serving the grid without it")
    return output.data_url()


def _view(output: RenderOutput) -> dict:
    return {
        'src': _preview_src(output),
        'size': output.layout.size_px,
        'style': output.container_style(),
        'css_class': output.container_class(),
        'overlay': output.overlay,
        'version': output.matrix.version,
        'side': output.matrix.side,
        'mask': output.matrix.mask,
        'warnings': output.warnings,
    }


@app.route('/', methods=['GET', 'POST'])
def index():
    text = (request.values.get('text') or "").strip()
    level = (request.values.get('level') or "M").strip().upper()
    fmt = RenderFormat.from_str(request.values.get('type') or 'svg').value
    status = Status.from_str(request.values.get('status')).value
    qr_view = None
    error = None
    code = 200

    if request.method == 'POST':
        try:
            params = _read_params(request)
            output = _generate(*params)
            qr_view = _view(output)
        except QRWidgetError as ex:
            error = f"Could not generate the QR code: {ex}"
            logger.error(f"QR generation failed: {ex}")
            code = 400

    return render_template_string(
        TEMPLATE,
        text=text, level=level, fmt=fmt, status=status,
        levels=[l.value for l in ErrorCorrectionLevel],
        statuses=[s.value for s in Status],
        size=request.values.get('size') or QRCodeSize.from_pixels(RenderConfig().size_px),
        color=request.values.get('color') or "#000000",
        bg_color=request.values.get('bg_color') or "transparent",
        qr=qr_view, error=error
    ), code


@app.route('/export/svg', methods=['GET'])
def export_svg():
    try:
        text, level, _fmt, status, config, icon = _read_params(request)
        output = _generate(text, level, RenderFormat.VECTOR, status, config, icon)
    except QRWidgetError as ex:
        logger.error(f"SVG export failed: {ex}")
        return str(ex), 400
    buf = BytesIO(output.markup.encode('utf-8'))
    return send_file(buf, as_attachment=True, download_name='qr.svg', mimetype='image/svg+xml')


@app.route('/export/png', methods=['GET'])
def export_png():
    try:
        text, level, _fmt, status, config, icon = _read_params(request)
        output = _generate(text, level, RenderFormat.RASTER, status, config, icon)
    except QRWidgetError as ex:
        logger.error(f"PNG export failed: {ex}")
        return str(ex), 400
    if not output.raster.wait(app.config['QR_ICON_TIMEOUT']):
        logger.warning("QR icon not ready in time, exporting the grid without it")
    buf = BytesIO(output.raster.to_png())
    return send_file(buf, as_attachment=True, download_name='qr.png', mimetype='image/png')


@app.route('/refresh', methods=['POST'])
def refresh():
    try:
        # The client only asks for a refresh while the code is expired
        text, level, fmt, _status, config, icon = _read_params(request)
        expired = _generate(text, level, fmt, Status.EXPIRED, config, icon)
        output = expired.refresh()
    except QRWidgetError as ex:
        logger.error(f"QR refresh failed: {ex}")
        return jsonify({'error': str(ex)}), 400

    return jsonify({
        'status': output.status.value,
        'format': output.format.value,
        'version': output.matrix.version,
        'side': output.matrix.side,
        'src': _preview_src(output),
        'warnings': [w.message for w in output.warnings],
    })


if __name__ == "__main__":
    app.run(debug=True)
