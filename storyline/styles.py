GLOBAL_CSS = """
<style>
:root {
  --font: 'Montserrat', system-ui, -apple-system, Segoe UI, Roboto, 'Helvetica Neue', Arial, sans-serif;
  --muted: #64748b;
  --provisional: #F59E0B;
}
html, body, [class^="css"] { font-family: var(--font); }
.block-container { padding-top: 1.25rem; }
.empty { padding: 2rem 1rem; color: var(--muted); }
.detail-date { display:block; margin:-0.4rem 0 0.6rem; color: var(--muted); font-size: 0.9rem; }
.detail-date.provisional { color: var(--provisional); font-weight: 600; }
.participant { display:inline-block; margin:0 10px 4px 0; font-size: 0.85rem; }
.swatch { display:inline-block; width:10px; height:10px; border-radius:50%; margin-right:6px; vertical-align:middle; }
</style>
"""
