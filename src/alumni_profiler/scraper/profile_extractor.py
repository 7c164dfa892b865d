"""Structured field extraction from rendered profile markup.

Every field has an ordered tuple of *candidate locators*: small pure
functions that take the parsed document and return either a string or a
list of elements.  Candidates are evaluated left to right and the first one
that yields something non-empty wins.

Ordering policy: layouts currently served by the source come first, legacy
layouts after them.  When the source ships a new layout, prepend a locator
for it; never reorder the existing ones, so pages in older layouts keep
extracting exactly as before.

Extraction never raises.  A field no locator can find is returned empty.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from bs4 import BeautifulSoup, Tag

from alumni_profiler.core.models.profiles import PastRole
from alumni_profiler.scraper.config import HEADLINE_SEPARATOR, MIN_ENTRY_LENGTH

logger = logging.getLogger(__name__)

TextLocator = Callable[[BeautifulSoup], str]
ElementsLocator = Callable[[BeautifulSoup], list[Tag]]

_WHITESPACE_RE = re.compile(r"\s+")

#: Removed before any locator runs.  Screen-reader spans duplicate the
#: visible text of the element they annotate.
_NOISE_SELECTOR = "script, style, noscript, template, .visually-hidden"


# ---------------------------------------------------------------------------
# Output dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PartialProfile:
    """Fields extracted from one page, before summarisation.

    Attributes:
        name: Display name.
        title: Headline title (text before ``" at "``, or the whole headline).
        company: Headline company (text after ``" at "``), else empty.
        location: Free-text location.
        about: Raw "about" section text, input to the summarizer.
        education: ``"<school> - <degree>"`` entries in page order.
        past_roles: Earlier positions in page order.
    """

    name: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    about: str = ""
    education: tuple[str, ...] = ()
    past_roles: tuple[PastRole, ...] = ()


# ---------------------------------------------------------------------------
# Locator builders
# ---------------------------------------------------------------------------


def _clean(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _lines(element: Tag) -> list[str]:
    """Visible text lines of ``element``, one per text node, whitespace-collapsed."""
    return [line for line in (_clean(s) for s in element.stripped_strings) if line]


def text_at(selector: str) -> TextLocator:
    """Locator returning the cleaned text of the first element matching ``selector``."""

    def _locate(soup: BeautifulSoup) -> str:
        element = soup.select_one(selector)
        if element is None:
            return ""
        return _clean(element.get_text(" ", strip=True))

    _locate.__name__ = f"text_at({selector!r})"
    return _locate


def elements_at(selector: str) -> ElementsLocator:
    """Locator returning every element matching ``selector``, in document order."""

    def _locate(soup: BeautifulSoup) -> list[Tag]:
        return list(soup.select(selector))

    _locate.__name__ = f"elements_at({selector!r})"
    return _locate


# ---------------------------------------------------------------------------
# Candidate locators per field (newest layout first)
# ---------------------------------------------------------------------------

NAME_LOCATORS: tuple[TextLocator, ...] = (
    text_at("h1.text-heading-xlarge"),
    text_at("h1.top-card-layout__title"),
    text_at("h1.pv-top-card-section__name"),
    text_at("li.inline.t-24"),
)

HEADLINE_LOCATORS: tuple[TextLocator, ...] = (
    text_at("div.text-body-medium.break-words"),
    text_at("h2.top-card-layout__headline"),
    text_at("div.top-card-layout__headline"),
    text_at("h2.pv-top-card-section__headline"),
)

LOCATION_LOCATORS: tuple[TextLocator, ...] = (
    text_at("span.text-body-small.inline.t-black--light.break-words"),
    text_at("div.top-card__subline-item"),
    text_at("span.top-card__subline-item"),
    text_at("h3.pv-top-card-section__location"),
)

ABOUT_LOCATORS: tuple[TextLocator, ...] = (
    text_at("div.display-flex.ph5.pv3"),
    text_at("section.summary div.core-section-container__content"),
    text_at("div.pv-shared-text-with-see-more"),
    text_at("div.inline-show-more-text"),
    text_at("p.pv-about__summary-text"),
)

EXPERIENCE_LOCATORS: tuple[ElementsLocator, ...] = (
    elements_at('section[data-section="experience"] li.experience-item'),
    elements_at('section[data-section="experience"] li.profile-section-card'),
    elements_at(
        "section#experience-section li.artdeco-list__item, "
        "section.experience-section li.artdeco-list__item"
    ),
    elements_at(
        "section#experience-section li.pv-entity__position-group-pager, "
        "section.experience-section li.pv-entity__position-group-pager"
    ),
    elements_at("li.pv-entity__position-group-role-item"),
)

EDUCATION_LOCATORS: tuple[ElementsLocator, ...] = (
    elements_at('section[data-section="educationsDetails"] li.education__list-item'),
    elements_at('section[data-section="education"] li.profile-section-card'),
    elements_at(
        "section#education-section li.artdeco-list__item, "
        "section.education-section li.artdeco-list__item"
    ),
    elements_at(
        "section#education-section li.pv-education-entity, "
        "section.education-section li.pv-education-entity"
    ),
)


# ---------------------------------------------------------------------------
# Fallback-chain evaluation
# ---------------------------------------------------------------------------


def first_text(soup: BeautifulSoup, locators: Sequence[TextLocator]) -> str:
    """Return the first non-empty result of ``locators``, or ``""``."""
    for locate in locators:
        value = locate(soup)
        if value:
            return value
    return ""


def first_elements(soup: BeautifulSoup, locators: Sequence[ElementsLocator]) -> list[Tag]:
    """Return the first non-empty element list of ``locators``, or ``[]``."""
    for locate in locators:
        found = locate(soup)
        if found:
            return found
    return []


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def split_headline(headline: str) -> tuple[str, str]:
    """Split ``"Title at Company"`` on the first separator.

    Returns:
        ``(title, company)``; company is empty when there is no separator.
    """
    if HEADLINE_SEPARATOR in headline:
        title, company = headline.split(HEADLINE_SEPARATOR, 1)
        return title.strip(), company.strip()
    return headline.strip(), ""


def parse_education_entry(element: Tag) -> str | None:
    lines = _lines(element)
    entry = " - ".join(lines[:2])
    if len(entry) < MIN_ENTRY_LENGTH:
        return None
    return entry


def parse_past_role(element: Tag) -> PastRole | None:
    """Map an experience container to a role: title, company, years, location."""
    lines = _lines(element)
    if len(lines) < 2 or len(" ".join(lines)) < MIN_ENTRY_LENGTH:
        return None
    return PastRole(
        title=lines[0],
        company=lines[1],
        years=lines[2] if len(lines) > 2 else "",
        location=lines[3] if len(lines) > 3 else None,
    )


# ---------------------------------------------------------------------------
# Public extraction function
# ---------------------------------------------------------------------------


def extract_profile(html: str) -> PartialProfile:
    """Extract profile fields from rendered markup.

    The document is parsed afresh on every call, so repeated extraction of
    the same markup yields equal results.

    Args:
        html: Full rendered page markup (may be partial or malformed).

    Returns:
        A :class:`PartialProfile`; missing fields are empty.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    for noise in soup.select(_NOISE_SELECTOR):
        noise.extract()

    title, company = split_headline(first_text(soup, HEADLINE_LOCATORS))

    education = tuple(
        entry
        for entry in (parse_education_entry(el) for el in first_elements(soup, EDUCATION_LOCATORS))
        if entry is not None
    )
    past_roles = tuple(
        role
        for role in (parse_past_role(el) for el in first_elements(soup, EXPERIENCE_LOCATORS))
        if role is not None
    )

    profile = PartialProfile(
        name=first_text(soup, NAME_LOCATORS),
        title=title,
        company=company,
        location=first_text(soup, LOCATION_LOCATORS),
        about=first_text(soup, ABOUT_LOCATORS),
        education=education,
        past_roles=past_roles,
    )
    logger.debug(
        "scraper: extracted name=%r roles=%d education=%d about_len=%d",
        profile.name,
        len(profile.past_roles),
        len(profile.education),
        len(profile.about),
    )
    return profile
