"""
transforms.py - Per-List Text Transforms

Some filter lists are not published in ABP syntax, or carry content the engine
should not see. A transform rewrites a fetched list body before it is handed
to the compiler.

Transforms are looked up by name in TRANSFORMS. A catalog entry opts in with
a "transform" key:

    {"uuid": "...", "url": "https://.../hosts", "transform": "hosts"}

Adding a transform for another list means adding a function to the table and
naming it in the catalog. Entries without a "transform" key are compiled as
fetched.
"""

import re
from typing import Callable, Final, Optional


# =============================================================================
# PATTERNS
# =============================================================================

#: Hosts format: IP domain [domain2 ...]
HOSTS_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?=[\d.:a-fA-F]*[\d:])"  # IP needs a digit or colon
    r"([\d.:a-fA-F]+)\s+"      # IP address (IPv4 or IPv6)
    r"(.+)$"                   # Rest of line (domains)
)

#: Valid domain token on a hosts line
HOSTS_DOMAIN_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9][\w.-]*$")

#: Plain domain (simple domain name, no special chars except . and -)
PLAIN_DOMAIN_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

#: ABP list header: [Adblock Plus 2.0]
HEADER_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*\[adblock.*\]\s*$", re.IGNORECASE)

#: Sink addresses used by hosts files to block a name
BLOCKING_IPS: Final[frozenset[str]] = frozenset({
    "0.0.0.0", "127.0.0.1", "::1", "::0", "::", "0:0:0:0:0:0:0:0", "0:0:0:0:0:0:0:1",
})

#: Hostnames every hosts file maps to loopback; never blocked
LOCAL_HOSTNAMES: Final[frozenset[str]] = frozenset({
    "localhost", "localhost.localdomain", "local", "broadcasthost",
    "ip6-localhost", "ip6-loopback", "ip6-localnet",
    "ip6-mcastprefix", "ip6-allnodes", "ip6-allrouters", "ip6-allhosts",
})


# =============================================================================
# TRANSFORMS
# =============================================================================

def _normalize_domain(domain: str) -> str:
    return domain.lower().strip().rstrip(".")


def _hosts_line_domains(line: str) -> list[str]:
    match = HOSTS_PATTERN.match(line)
    if not match:
        return []

    ip = match.group(1)
    if ip not in BLOCKING_IPS and not ip.startswith("0.") and not ip.startswith("127."):
        return []

    domains = []
    for part in match.group(2).split():
        # Stop at comments
        if part.startswith("#"):
            break
        if HOSTS_DOMAIN_PATTERN.match(part):
            domain = _normalize_domain(part)
            if domain and domain not in LOCAL_HOSTNAMES:
                domains.append(domain)
    return domains


def hosts_to_abp(body: str) -> str:
    """
    Convert a hosts file or plain domain list into ABP network rules.

    Comments, blank lines, local hostnames and non-sink IP mappings are
    dropped. Lines that are neither hosts entries nor plain domains are kept
    as they are, so ABP rules mixed into the list survive.

    Example:
        >>> hosts_to_abp("# ads\\n0.0.0.0 ads.example.com\\ntracker.example.net")
        '||ads.example.com^\\n||tracker.example.net^'
    """
    out = []
    for raw in body.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or line.startswith("!"):
            continue

        if HOSTS_PATTERN.match(line):
            out.extend(f"||{domain}^" for domain in _hosts_line_domains(line))
            continue

        if PLAIN_DOMAIN_PATTERN.match(line):
            domain = _normalize_domain(line)
            if domain not in LOCAL_HOSTNAMES:
                out.append(f"||{domain}^")
            continue

        out.append(line)

    return "\n".join(out)


def strip_comments(body: str) -> str:
    """
    Drop "!" comment lines and the "[Adblock Plus x.y]" header.

    Example:
        >>> strip_comments("[Adblock Plus 2.0]\\n! Title: x\\n||a.com^")
        '||a.com^'
    """
    return "\n".join(
        line for line in body.splitlines()
        if not line.lstrip().startswith("!") and not HEADER_PATTERN.match(line)
    )


#: Transform name -> function. Catalog entries reference these names.
TRANSFORMS: Final[dict[str, Callable[[str], str]]] = {
    "hosts": hosts_to_abp,
    "strip-comments": strip_comments,
}


def transform_for(descriptor) -> Optional[Callable[[str], str]]:
    """Return the transform a list descriptor asks for, or None."""
    name = getattr(descriptor, "transform", None)
    if name is None:
        return None
    return TRANSFORMS[name]
