"""Link dimension — classify links as internal/external and detect broken ones."""

import re
from urllib.parse import urlparse

_MARKDOWN_LINK_RE = re.compile(r"\[[^\]]*\]\(([^)\s]*)(?:\s+\"[^\"]*\")?\)")
_HREF_RE = re.compile(r"href\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)
_BARE_URL_RE = re.compile(r"\b[a-z][a-z0-9+.-]*://[^\s<>\"')\]]+", re.IGNORECASE)
_HOST_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]*[a-z0-9])?)*(?::\d+)?$", re.IGNORECASE)

SKIPPED_SCHEMES = {"mailto", "tel"}


def extract_links(text: str) -> list[str]:
    """Return links in document order, each occurrence kept once."""
    found: list[tuple[int, str]] = []
    masked = text or ""

    for pattern in (_MARKDOWN_LINK_RE, _HREF_RE):
        for match in pattern.finditer(masked):
            found.append((match.start(), match.group(1).strip()))
        masked = pattern.sub(lambda m: " " * len(m.group(0)), masked)

    for match in _BARE_URL_RE.finditer(masked):
        found.append((match.start(), match.group(0).rstrip(".,;:!?")))

    found.sort(key=lambda item: item[0])

    links: list[str] = []
    for _, url in found:
        if url not in links:
            links.append(url)
    return links


def _is_relative(url: str) -> bool:
    return not urlparse(url).scheme and not url.startswith("//")


def _is_internal(host: str, site_domain: str | None) -> bool:
    if not site_domain:
        return False
    host = host.lower().split(":")[0]
    site_domain = site_domain.lower()
    return host == site_domain or host.endswith("." + site_domain)


def _broken_reason(url: str, link_status: dict) -> str | None:
    if not url or url == "#":
        return "empty"

    status = link_status.get(url)
    if status is not None and int(status) >= 400:
        return f"http_{int(status)}"

    if _is_relative(url):
        return None

    parsed = urlparse(url if not url.startswith("//") else "https:" + url)
    if parsed.scheme not in ("http", "https"):
        return "unsupported_scheme"
    if not parsed.netloc or not _HOST_RE.match(parsed.netloc):
        return "malformed"
    return None


def check_links(text: str, site_domain: str | None = None, link_status: dict | None = None) -> dict:
    link_status = link_status or {}

    internal, external, broken = [], [], []
    for url in extract_links(text):
        scheme = urlparse(url).scheme.lower()
        if scheme in SKIPPED_SCHEMES:
            continue

        reason = _broken_reason(url, link_status)
        if reason is not None:
            broken.append({"url": url, "reason": reason})
            continue

        if _is_relative(url):
            internal.append(url)
        else:
            host = urlparse(url if not url.startswith("//") else "https:" + url).netloc
            (internal if _is_internal(host, site_domain) else external).append(url)

    total = len(internal) + len(external) + len(broken)
    score = 100.0 if total == 0 else round(100.0 * (total - len(broken)) / total, 2)

    return {
        "score": score,
        "passed": len(broken) == 0,
        "details": {
            "internal_links": internal,
            "external_links": external,
            "broken_links": broken,
        },
    }
