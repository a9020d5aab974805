"""Redirect target validation.

The post-login redirect path is read back from the session, where it was
stored from a request path. It is still checked before use so a value
that is not a same-origin relative path can never become an open
redirect.
"""


def is_safe_url(url: str) -> bool:
    """Check whether *url* is a same-origin relative path.

    Examples::

        >>> is_safe_url("/snippet/create")
        True
        >>> is_safe_url("//evil.com")
        False
        >>> is_safe_url("https://evil.com")
        False
        >>> is_safe_url("")
        False
    """
    if not url or not isinstance(url, str):
        return False
    if not url.startswith("/") or url.startswith("//"):
        return False
    # Browsers treat a backslash like a slash, so "/\evil.com" is protocol-relative
    if url.startswith("/\\"):
        return False
    return "://" not in url
