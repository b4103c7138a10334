import os
from html import escape
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlmodel import Session

from app.db.db import get_session
from app.models.user import User
from app.services import ads as ad_service
from app.utils.errors import MarketplaceError
from app.utils.form_validator import as_utc
from app.utils.slug import slugify

router = APIRouter()

# canonical UUID text is 36 characters and always ends the slug
AD_ID_LENGTH = 36


def base_url() -> str:
    return os.getenv("BASE_URL", "http://localhost:8000").rstrip("/")


def share_path(ad) -> str:
    slug = slugify(ad.title)
    return f"/share/ad/{slug}-{ad.id}" if slug else f"/share/ad/{ad.id}"


def _message_page(title: str, message: str, status_code: int) -> HTMLResponse:
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{escape(title)} - Campus Market</title></head>
<body>
<h1>{escape(title)}</h1>
<p>{escape(message)}</p>
<a href="/">Back to Campus Market</a>
</body>
</html>""",
        status_code=status_code,
    )


def _ad_page(ad, author, url: str) -> str:
    title = escape(ad.title)
    description = escape(ad.description)
    seller = ""
    if author:
        contact = f"<p>Contact: {escape(author.contact)}</p>" if author.contact else ""
        seller = f'<div class="seller"><p>Sold by {escape(author.name)}</p>{contact}</div>'

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title} - Campus Market</title>
<meta name="description" content="{description}">
<meta property="og:type" content="product">
<meta property="og:url" content="{escape(url)}">
<meta property="og:title" content="{title} - Campus Market">
<meta property="og:description" content="{description}">
</head>
<body>
<h1>{title}</h1>
<p class="price">{escape(ad.price)}</p>
<p>{description}</p>
<p>{escape(ad.location)}, available until {as_utc(ad.available_until).strftime("%d/%m/%Y %H:%M")} UTC</p>
{seller}
</body>
</html>"""


@router.get("/share/generate-link/{ad_id}")
def generate_share_link(
    ad_id: str,
    session: Session = Depends(get_session),
):
    ad = ad_service.get_ad_or_404(session, ad_id)

    return {
        "share_url": base_url() + share_path(ad),
        "ad_title": ad.title,
        "ad_price": ad.price,
    }


@router.get("/share/ad/{slug}", response_class=HTMLResponse)
def shared_ad_page(
    slug: str,
    session: Session = Depends(get_session),
):
    try:
        ad = ad_service.get_ad_or_404(session, slug[-AD_ID_LENGTH:])
    except MarketplaceError as e:
        if e.status_code == 404:
            return _message_page("Ad not found", "This ad does not exist or was removed.", 404)
        return _message_page("Invalid link", "The link you followed is not valid.", 400)

    author = session.get(User, ad.author_id)
    return HTMLResponse(_ad_page(ad, author, base_url() + f"/share/ad/{slug}"))
