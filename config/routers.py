"""
Custom DRF routers.

DRF's DefaultRouter uses format_suffix_patterns which registers a custom
converter 'drf_format_suffix'. When several routers exist across apps,
this causes a ValueError: "Converter 'drf_format_suffix' is already registered."
"""

from rest_framework.routers import DefaultRouter


class SafeDefaultRouter(DefaultRouter):
    """
    DefaultRouter that doesn't use format suffix patterns.
    """
    include_format_suffixes = False


class PrefixRouter(SafeDefaultRouter):
    """
    Router for apps mounted under a shared prefix such as ``api/newsroom/``.

    Only one app may own the API root view at a given prefix, so these
    routers skip it.
    """
    include_root_view = False
