"""Stage 2 — resolve image placeholder tokens.

`![alt](image:query)` and `![alt](unsplash://query)` become lazy-loaded image
tags pointing at an image search for destination + query. With images
disabled the placeholders are dropped.
"""

import html
import re

from app.services.content.links import links_for

IMAGE_TOKEN_RE = re.compile(r"!\[([^\]]*)\]\(\s*(?:image:|unsplash://)([^)]+?)\s*\)", re.IGNORECASE)


def resolve_image_tokens(markdown: str, destination: str | None, enabled: bool = True) -> str:
    if not markdown:
        return markdown
    if not enabled:
        stripped = IMAGE_TOKEN_RE.sub("", markdown)
        return re.sub(r"\n{3,}", "\n\n", stripped)

    links = links_for(destination)

    def _replace(m: re.Match) -> str:
        query = m.group(2).strip()
        alt = m.group(1).strip() or f"{destination or ''} {query}".strip()
        src = links.image(query)
        return (
            f'<img src="{html.escape(src, quote=True)}" alt="{html.escape(alt, quote=True)}" '
            f'loading="lazy" class="plan-image" />'
        )

    return IMAGE_TOKEN_RE.sub(_replace, markdown)
