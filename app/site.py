"""Web app manifest served alongside the static site."""

SITE_NAME = "Marzellus"

MANIFEST_ICON_SIZES = (192, 512)
MANIFEST_ICON_PURPOSES = ("any", "maskable")


def build_manifest() -> dict:
    """Web app manifest: one PNG icon per purpose and size under /icons/ (published with the static site)."""
    icons = [
        {
            "src": f"/icons/{purpose}-{size}.png",
            "sizes": f"{size}x{size}",
            "type": "image/png",
            "purpose": purpose,
        }
        for purpose in MANIFEST_ICON_PURPOSES
        for size in MANIFEST_ICON_SIZES
    ]
    return {
        "short_name": SITE_NAME,
        "name": SITE_NAME,
        "icons": icons,
        "display": "minimal-ui",
        "id": "/",
        "start_url": "/",
        "theme_color": "#262626",
        "background_color": "#404040",
    }
