"""
Company Permission Aliases

Pages of the `company` module were renamed; grants stored under either the
new or the legacy key must keep working.
"""

COMPANY_MODULE = "company"

# new key -> legacy key
COMPANY_PERMISSION_KEY_ALIASES: dict[str, str] = {
    "dashboard": "setup",
    "info": "setup",
    "siteManagement": "setup",
    "checklists": "checklist",
    "myChecklists": "checklist",
}


def alias_candidates(module: str, page: str) -> list[str]:
    """
    Other keys a page may be stored under, in lookup order.

    A new key falls back to its legacy key; a legacy key falls back to every
    new key that maps onto it. Only the company module has aliases.
    """
    if module != COMPANY_MODULE:
        return []

    candidates = []
    legacy = COMPANY_PERMISSION_KEY_ALIASES.get(page)
    if legacy:
        candidates.append(legacy)
    candidates.extend(new for new, old in COMPANY_PERMISSION_KEY_ALIASES.items() if old == page)
    return candidates
