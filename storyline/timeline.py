# storyline/timeline.py — draws a computed TimelineLayout inside a Streamlit component
# • All geometry comes from storyline.layout; the page script only positions boxes
# • Lane headers stick to the left edge while the canvas scrolls horizontally
# • Montserrat font, pastel lane stripes, selected/dragging outlines

import json
import streamlit.components.v1 as components

_FONT_CSS_URL = "https://fonts.googleapis.com/css2?family=Montserrat:wght@400;600;700&display=swap"


def layout_payload(layout) -> dict:
    """JSON-safe dict of everything the page script needs to draw."""
    return {
        "width": layout.total_width,
        "height": layout.content_height,
        "pixelsPerDay": layout.pixels_per_day,
        "rangeStart": layout.range_start.isoformat(),
        "rangeEnd": layout.range_end.isoformat(),
        "lanes": [
            {"index": ln.index, "name": ln.name, "color": ln.color, "general": ln.is_general}
            for ln in layout.lanes
        ],
        "blocks": [
            {
                "id": b.visual_id,
                "eventId": b.event_id,
                "x": b.x, "y": b.y, "w": b.width, "h": b.height,
                "color": b.color,
                "title": b.title,
                "date": b.day.isoformat(),
                "instant": b.is_instantaneous,
                "selected": b.is_selected,
                "dragging": b.is_dragging,
            } for b in layout.blocks
        ],
        "arcs": [
            {
                "id": a.arc_id,
                "x": a.x, "y": a.y, "w": a.width, "h": a.height,
                "color": a.color,
                "name": a.name,
                "peakX": a.peak_x,
                "selected": a.is_selected,
            } for a in layout.arcs
        ],
        "ticks": [
            {"x": t.x, "h": t.height, "label": t.label, "major": t.is_major}
            for t in layout.ticks
        ],
    }


def timeline_html(layout, metrics, height_px: int | None = None) -> str:
    payload_json = json.dumps(layout_payload(layout)).replace("</", "<\\/")
    H = int(height_px or layout.content_height)

    html = """
<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <link href="__FONT_URL__" rel="stylesheet">
  <style>
    :root { --font: 'Montserrat', ui-sans-serif, -apple-system, Segoe UI, Roboto, Helvetica, Arial, sans-serif; }
    html, body { background: transparent; margin:0; padding:0; font-family: var(--font); }
    #scroll { height: __HEIGHT__px; overflow: auto; border-radius:12px; border:1px solid #e7e9f2; position: relative; }
    #canvas { position: relative; }
    .lane { position:absolute; left:0; border-bottom:1px solid rgba(128,128,128,.15); }
    .lane.odd { background: rgba(0,0,0,.02); }
    .lane-name { position:sticky; left:0; display:inline-block; width:__HEADER__px; font-size:10px; font-weight:600;
                 color:#64748b; padding-left:6px; box-sizing:border-box; background:#fff; height:100%; }
    .lane-dot { display:inline-block; width:8px; height:8px; border-radius:50%; margin-right:5px; }
    .axis { position:absolute; top:10px; height:40px; }
    .tick { position:absolute; width:1px; background: rgba(128,128,128,.6); }
    .tick-label { position:absolute; top:26px; transform: translateX(-50%); font-size:8px; color:#64748b; white-space:nowrap; }
    .tick-label.major { font-size:9px; font-weight:600; }
    .arc { position:absolute; border-radius:4px; opacity:.55; }
    .arc.selected { opacity:.9; outline:2px solid #111; }
    .peak { position:absolute; width:2px; background:#111; }
    .ev { position:absolute; border-radius:7px; box-sizing:border-box; padding:4px 7px; overflow:hidden;
          border:.75px solid rgba(0,0,0,.25); box-shadow: 0 1.5px 2px rgba(0,0,0,.15); color:#111; }
    .ev.instant { padding:0; }
    .ev.selected { border:2px solid #3B82F6; box-shadow: 0 2px 3px rgba(0,0,0,.25); }
    .ev.dragging { opacity:.8; }
    .ttl { font-weight:700; font-size:11px; white-space:nowrap; overflow:hidden; text-overflow:ellipsis; }
    .sub { font-size:9px; opacity:.75; white-space:nowrap; }
    .err { padding:14px; color:#b00020; font-size:13px; }
  </style>
</head>
<body>
  <div id="scroll"><div id="canvas"></div></div>

  <script>
    const LAYOUT = __LAYOUT__;
    const CONTENT_LEFT = __CONTENT_LEFT__;
    const LANE_H = __LANE_H__;
    const AXIS_H = __AXIS_H__;
    const PEAK_H = __PEAK_H__;

    function escapeHtml(s){ return String(s || '').replace(/[&<>"]/g, c => ({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;'}[c])); }
    function el(tag, cls, style){ const n=document.createElement(tag); if (cls) n.className=cls; if (style) Object.assign(n.style, style); return n; }
    function px(v){ return v + 'px'; }
    function shortDate(iso){ const d=new Date(iso + 'T00:00:00'); return d.toLocaleDateString(undefined, {month:'short', day:'numeric'}); }

    function draw() {
      const canvas = document.getElementById('canvas');
      canvas.style.width = px(LAYOUT.width);
      canvas.style.height = px(LAYOUT.height);

      LAYOUT.lanes.forEach(ln => {
        const row = el('div', 'lane' + (ln.index % 2 ? '' : ' odd'), { top: px(AXIS_H + ln.index * LANE_H), height: px(LANE_H), width: px(LAYOUT.width) });
        const name = el('span', 'lane-name', { lineHeight: px(LANE_H) });
        name.innerHTML = (ln.general ? '' : '<span class="lane-dot" style="background:' + escapeHtml(ln.color || '#94a3b8') + '"></span>') + escapeHtml(ln.name);
        row.appendChild(name);
        canvas.appendChild(row);
      });

      const axis = el('div', 'axis', { left: px(CONTENT_LEFT), width: px(LAYOUT.width - CONTENT_LEFT) });
      axis.appendChild(el('div', 'tick', { left: '0px', top: '20px', height: '1px', width: px(LAYOUT.width - CONTENT_LEFT) }));
      LAYOUT.ticks.forEach(t => {
        axis.appendChild(el('div', 'tick', { left: px(t.x), top: px(20 - t.h / 2), height: px(t.h) }));
        if (t.label) {
          const lab = el('div', 'tick-label' + (t.major ? ' major' : ''), { left: px(t.x) });
          lab.textContent = t.label;
          axis.appendChild(lab);
        }
      });
      canvas.appendChild(axis);

      LAYOUT.arcs.forEach(a => {
        const bar = el('div', 'arc' + (a.selected ? ' selected' : ''), { left: px(a.x), top: px(a.y), width: px(a.w), height: px(a.h), background: a.color });
        bar.title = a.name;
        canvas.appendChild(bar);
        if (a.peakX !== null && a.peakX !== undefined) {
          const tickH = PEAK_H;
          canvas.appendChild(el('div', 'peak', { left: px(a.peakX - 1), top: px(a.y - (tickH - a.h) / 2), height: px(tickH) }));
        }
      });

      LAYOUT.blocks.forEach(b => {
        const cls = 'ev' + (b.instant ? ' instant' : '') + (b.selected ? ' selected' : '') + (b.dragging ? ' dragging' : '');
        const box = el('div', cls, { left: px(b.x), top: px(b.y), width: px(b.w), height: px(b.h), background: b.color, zIndex: (b.selected || b.dragging) ? 3 : 2 });
        box.title = b.title + ' · ' + b.date;
        if (!b.instant) {
          box.innerHTML = '<div class="ttl">' + escapeHtml(b.title) + '</div>' + (b.w > 45 ? '<div class="sub">' + escapeHtml(shortDate(b.date)) + '</div>' : '');
        }
        canvas.appendChild(box);
      });
    }

    try { draw(); }
    catch (e) { document.getElementById('scroll').innerHTML = '<div class="err"><b>Timeline failed to draw.</b><br/>' + escapeHtml(e && (e.stack || e.message)) + '</div>'; }
  </script>
</body>
</html>
    """.replace("__FONT_URL__", _FONT_CSS_URL) \
       .replace("__HEIGHT__", str(H)) \
       .replace("__HEADER__", str(metrics.lane_header_width)) \
       .replace("__CONTENT_LEFT__", str(metrics.content_left)) \
       .replace("__LANE_H__", str(metrics.lane_height)) \
       .replace("__AXIS_H__", str(metrics.axis_header_height)) \
       .replace("__PEAK_H__", str(metrics.peak_tick_height)) \
       .replace("__LAYOUT__", payload_json)
    return html


def render_timeline(layout, metrics, height_px: int | None = None):
    H = int(height_px or layout.content_height)
    components.html(timeline_html(layout, metrics, H), height=H + 20, scrolling=False)
