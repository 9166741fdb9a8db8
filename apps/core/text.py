"""
Plain-text views of the rich-text (HTML) story content.
"""

from bs4 import BeautifulSoup

EXCERPT_LENGTH = 150


def html_to_text(html: str) -> str:
    """Visible text of an HTML fragment with whitespace collapsed."""
    if not html:
        return ''
    soup = BeautifulSoup(html, 'html.parser')
    for tag in soup(['script', 'style']):
        tag.decompose()
    return ' '.join(soup.get_text(separator=' ').split())


def word_count(html: str) -> int:
    return len(html_to_text(html).split())


def excerpt(html: str, length: int = EXCERPT_LENGTH) -> str:
    """First ``length`` characters of the text, cut on a word boundary."""
    text = html_to_text(html)
    if len(text) <= length:
        return text
    cut = text[:length].rsplit(' ', 1)[0]
    return f'{cut}...'
