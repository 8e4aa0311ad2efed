"""HTML rendering for the movie grid page."""

from __future__ import annotations

from html import escape
from textwrap import dedent
from urllib.parse import urlencode

from .catalog import CatalogView
from .config import Settings
from .models import DisplayRecord
from .normalizer import format_display_date


PAGE_TEMPLATE = dedent(
    """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>__APP_NAME__ · Movies</title>
    <style>
        :root {
            color-scheme: dark;
            font-family: 'Inter', 'Segoe UI', system-ui, -apple-system, sans-serif;
            --surface: #141414;
            --text-primary: #f5f5f5;
            --text-muted: #a6a6a6;
            --outline: #1c1c1c;
            --accent: #ffd700;
            background: #000000;
            color: var(--text-primary);
        }
        body {
            margin: 0;
            background: #000000;
        }
        main {
            max-width: 1200px;
            margin: 0 auto;
            padding: 2rem 1.5rem 4rem;
        }
        header {
            display: flex;
            flex-wrap: wrap;
            align-items: center;
            justify-content: space-between;
            gap: 1rem;
            margin-bottom: 2rem;
        }
        header h1 {
            margin: 0;
            color: var(--accent);
        }
        .grid {
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(180px, 1fr));
            gap: 1.25rem;
        }
        .movie-card {
            background: var(--surface);
            border: 1px solid var(--outline);
            border-radius: 12px;
            overflow: hidden;
        }
        .movie-card a {
            color: inherit;
            text-decoration: none;
        }
        .movie-poster {
            width: 100%;
            aspect-ratio: 2 / 3;
            object-fit: cover;
        }
        .movie-info {
            padding: 0.75rem;
        }
        .release-date {
            color: var(--accent);
            font-size: 0.8rem;
        }
        .movie-title {
            margin: 0.35rem 0;
            font-size: 1rem;
        }
        .movie-details {
            margin: 0;
            color: var(--text-muted);
            font-size: 0.8rem;
        }
        .pagination {
            display: flex;
            flex-wrap: wrap;
            gap: 0.5rem;
            justify-content: center;
            margin-top: 2rem;
        }
        .page-btn {
            padding: 0.4rem 0.8rem;
            border: 1px solid var(--outline);
            border-radius: 6px;
            color: var(--text-primary);
            text-decoration: none;
        }
        .page-btn.active {
            background: var(--accent);
            color: #000000;
        }
        .empty {
            color: var(--text-muted);
            text-align: center;
        }
    </style>
</head>
<body>
    <main>
        <header>
            <h1>__APP_NAME__</h1>
            <form method="get" action="/">
                <input type="search" name="q" value="__SEARCH__" placeholder="Search movies" />
            </form>
        </header>
        __SUMMARY__
        <section class="grid">
__CARDS__
        </section>
        <nav class="pagination">
__PAGINATION__
        </nav>
    </main>
</body>
</html>
"""
)


def render_movie_card(record: DisplayRecord) -> str:
    return (
        '            <article class="movie-card">'
        f'<a href="{escape(record.link)}">'
        f'<img src="{escape(record.poster)}" alt="{escape(record.title)}" '
        'class="movie-poster" loading="lazy" />'
        '<div class="movie-info">'
        f'<div class="release-date">{escape(format_display_date(record.date))}</div>'
        f'<h3 class="movie-title">{escape(record.title)}</h3>'
        f'<p class="movie-details">{escape(record.details)}</p>'
        "</div></a></article>"
    )


def render_pagination(view: CatalogView, *, search: str = "") -> str:
    buttons: list[str] = []
    for number in range(1, view.total_pages + 1):
        params: dict[str, str | int] = {"page": number}
        if search:
            params["q"] = search
        css = "page-btn active" if number == view.active_page else "page-btn"
        buttons.append(
            f'            <a class="{css}" href="/?{escape(urlencode(params))}">{number}</a>'
        )
    return "\n".join(buttons)


def render_catalog_page(settings: Settings, view: CatalogView, *, search: str = "") -> str:
    """Return the full HTML for the movie grid at the view's active page."""

    records = view.page()
    cards = "\n".join(render_movie_card(record) for record in records)
    summary = ""
    if search:
        summary = f'<p class="search-results">Found {view.total} results for "{escape(search)}"</p>'
    elif not records:
        summary = '<p class="empty">No movies available yet.</p>'

    html = PAGE_TEMPLATE
    replacements = {
        "__APP_NAME__": escape(settings.app_name),
        "__SEARCH__": escape(search),
        "__SUMMARY__": summary,
        "__CARDS__": cards,
        "__PAGINATION__": render_pagination(view, search=search),
    }
    for placeholder, value in replacements.items():
        html = html.replace(placeholder, value)
    return html
