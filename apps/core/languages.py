"""
Display names for story and station languages.

Stations store allowed languages by display name ("English", "Afrikaans"),
and LANGUAGE classifications are named the same way, so the mapping here is
what links a Story.language code to radio filtering.
"""

from apps.core.choices import Language

LANGUAGE_DISPLAY_NAMES = {
    Language.ENGLISH: 'English',
    Language.AFRIKAANS: 'Afrikaans',
    Language.XHOSA: 'Xhosa',
}


def format_language(code):
    """Display name for a language code; unknown codes come back unchanged."""
    if not code:
        return code
    return LANGUAGE_DISPLAY_NAMES.get(str(code).upper(), code)


def language_to_classification_name(code):
    """Name of the LANGUAGE classification for ``code`` ("XHOSA" -> "Xhosa")."""
    name = format_language(code)
    if name == code and isinstance(code, str):
        return code.capitalize()
    return name


def classification_name_to_language(name):
    """Reverse lookup; returns None when ``name`` is not a known language."""
    if not name:
        return None
    for code, display in LANGUAGE_DISPLAY_NAMES.items():
        if display.lower() == name.lower():
            return code.value
    return None
