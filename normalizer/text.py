"""Text helpers shared by the event and announcement normalizers."""
import html
import re
from typing import Optional

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r'\s')


def decode_entities(value: Optional[str]) -> str:
    """Decode HTML entities, treating missing values as empty strings."""
    return html.unescape(value) if value else ''


def clean_time(value: Optional[str]) -> str:
    """Strip all whitespace from a time range ("9:00 am - 10:00 am" -> "9:00am-10:00am")."""
    return _WHITESPACE.sub('', value) if value else ''


def append_more_info_link(body: str, url: Optional[str]) -> str:
    """
    Append a "More Information" link to an event body.
    
    Args:
        body: Decoded HTML body
        url: External link for the event, if any
        
    Returns:
        Body with the rendered link appended, unchanged when there is no
        link or the body already links to it
    """
    if not url or not url.strip():
        return body
    url = url.strip()
    
    if BeautifulSoup(body, 'html.parser').find('a', href=url):
        return body
    
    snippet = BeautifulSoup('', 'html.parser')
    paragraph = snippet.new_tag('p')
    anchor = snippet.new_tag('a', href=url)
    anchor.string = 'More Information'
    paragraph.append(anchor)
    return body + str(paragraph)
