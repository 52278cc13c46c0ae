"""HTML document rendering for ``HtmlPage``.

Builds the document from fixed fragments and joins it onto a single
line. Output depends only on the page's fields, so two renders of the
same page are byte-identical.

Field values are inserted verbatim; callers pass trusted markup.
"""

from tananoni.pages.types import HtmlPage, Link, Script
from tananoni.realtime.client import HOT_RELOAD_FILENAME


def render_html(page: HtmlPage) -> str:
    """Render ``page`` as a single-line HTML document."""
    parts = [
        "<!DOCTYPE html>",
        f'<html lang="{page.lang}">',
        "<head>",
        '<meta charset="UTF-8" />',
        f'<meta name="viewport" content="{page.viewport}" />',
        f"<title>{page.title}</title>",
        *(_link_tag(link) for link in page.links),
        "</head>",
    ]
    if page.global_css:
        parts.append(f"<style>{page.global_css}</style>")
    parts.append("<body>")
    parts.extend(f'<{mp.kind} id="{mp.id}"></{mp.kind}>' for mp in page.mount_points)
    parts.extend(_script_tag(script) for script in _scripts(page))
    parts.append("</body>")
    parts.append("</html>")
    return "".join(parts).replace("\n", "")


def _scripts(page: HtmlPage) -> tuple[Script, ...]:
    if page.hot_reload:
        return (*page.scripts, Script(HOT_RELOAD_FILENAME))
    return page.scripts


def _link_tag(link: Link) -> str:
    match link.kind:
        case "icon":
            return f'<link rel="icon" type="image/x-icon" href="{link.href}" />'
        case "stylesheet":
            return f'<link rel="stylesheet" href="{link.href}" />'
    msg = f"unknown link kind {link.kind!r}"
    raise ValueError(msg)


def _script_tag(script: Script) -> str:
    if script.kind == "module":
        return f'<script type="module" src="{script.src}"></script>'
    return f'<script src="{script.src}"></script>'
