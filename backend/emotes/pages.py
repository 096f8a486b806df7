"""
HTML pages: the usage page at / and the Open Graph preview that chat
clients (Discord etc.) unfurl when an emote link is pasted.
"""

from html import escape
from urllib.parse import quote

SITE_NAME = "7TV On Demand"
THEME_COLOR = "#6441a5"

_BASE_STYLE = """
      body {
        font-family: Arial, sans-serif;
        max-width: 800px;
        margin: 0 auto;
        padding: 20px;
        line-height: 1.6;
      }
      h1 { color: #6441a5; }
      code { background: #f4f4f4; padding: 2px 5px; border-radius: 3px; }
      img { max-width: 100%; margin: 20px 0; }
      .info { margin-top: 20px; color: #666; }
      a { color: #6441a5; text-decoration: none; }
      a:hover { text-decoration: underline; }
"""


def render_index_page() -> str:
    return f"""<!DOCTYPE html>
<html>
  <head>
    <title>{SITE_NAME}</title>
    <style>{_BASE_STYLE}</style>
  </head>
  <body>
    <h1>{SITE_NAME}</h1>
    <p>Fetch 7TV emotes by name.</p>
    <ul>
      <li><code>GET /{{emote-name}}</code> - the emote as an image</li>
      <li><code>GET /{{emote-name}}.webp</code> - the emote as WebP</li>
      <li><code>GET /{{emote-name}}.avif</code> - the emote as AVIF</li>
      <li><code>GET /{{emote-name}}.gif</code> - the emote as GIF (animated emotes)</li>
    </ul>
    <p>Optional parameter: <code>size</code> (1x, 2x, 3x, 4x)</p>
    <p>All emotes: <code>GET /api/emotes</code></p>
    <p>One emote: <code>GET /api/emote/{{emote-name}}</code></p>
  </body>
</html>
"""


def render_preview_page(emote_name: str, base_url: str, animated: bool) -> str:
    """
    Build the preview page for one emote.

    The image link points back at this service with .gif for animated
    emotes and .webp otherwise.
    """
    base_url = base_url.rstrip("/")
    name = escape(emote_name)
    # Percent-encode the path segment first ("?", "#", spaces), then escape for HTML
    segment = quote(emote_name, safe="")
    image_url = escape(f"{base_url}/{segment}.{'gif' if animated else 'webp'}")
    page_url = escape(f"{base_url}/{segment}")
    api_url = escape(f"{base_url}/api/emote/{segment}")
    base_url = escape(base_url)

    return f"""<!DOCTYPE html>
<html>
  <head>
    <title>{name} - {SITE_NAME}</title>
    <meta property="og:title" content="{name} - 7TV Emote" />
    <meta property="og:type" content="website" />
    <meta property="og:url" content="{page_url}" />
    <meta property="og:image" content="{image_url}" />
    <meta property="og:image:alt" content="{name} emote" />
    <meta property="og:description" content="7TV emote: {name}" />
    <meta property="og:site_name" content="{SITE_NAME}" />
    <meta name="theme-color" content="{THEME_COLOR}" />
    <meta http-equiv="refresh" content="0;url={image_url}">
    <style>{_BASE_STYLE}</style>
  </head>
  <body style="text-align: center">
    <h1>{name}</h1>
    <img src="{image_url}" alt="{name} emote" />
    <div class="info">
      <p>This is a 7TV emote.</p>
      <p><a href="{api_url}">Emote details as JSON</a></p>
      <p><a href="{base_url}">Back to the home page</a></p>
    </div>
  </body>
</html>
"""
