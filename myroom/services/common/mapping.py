# myroom/services/common/mapping.py
"""
Model-Schema mapping utilities.

Rows must be mapped while their session is still open; the schemas are what
leaves the service layer and what live subscribers receive.
"""
from __future__ import annotations

from typing import Iterable, List, Optional
from urllib.parse import quote

from myroom.models.listing import ListingColumnsMixin
from myroom.models.review import Review
from myroom.schemas.listing import ContactLink, ListingRead
from myroom.schemas.review import ReviewRead
from myroom.services.listing.filters import NEW_LISTING_DAYS, is_new_listing

WHATSAPP_URL = "https://wa.me/{contact}?text={message}"
WHATSAPP_GREETING = 'Hi, I’m interested in your room listing: "{title}" on MyRoom app.'


def to_listing_read(
    row: ListingColumnsMixin,
    now: Optional[int] = None,
    new_listing_days: int = NEW_LISTING_DAYS,
) -> ListingRead:
    listing = ListingRead.model_validate(row)
    listing.is_new = is_new_listing(listing.timestamp, now, new_listing_days)
    return listing


def to_listing_reads(
    rows: Iterable[ListingColumnsMixin],
    now: Optional[int] = None,
    new_listing_days: int = NEW_LISTING_DAYS,
) -> List[ListingRead]:
    return [to_listing_read(row, now, new_listing_days) for row in rows]


def to_review_read(row: Review) -> ReviewRead:
    return ReviewRead.model_validate(row)


def contact_links(title: str, contact_info: str) -> List[ContactLink]:
    """One WhatsApp link per comma separated contact."""
    message = quote(WHATSAPP_GREETING.format(title=title), safe="")
    links = []
    for contact in (contact_info or "").split(","):
        contact = contact.strip()
        if not contact:
            continue
        links.append(
            ContactLink(
                contact=contact,
                whatsapp_url=WHATSAPP_URL.format(contact=quote(contact, safe="+"), message=message),
            )
        )
    return links
