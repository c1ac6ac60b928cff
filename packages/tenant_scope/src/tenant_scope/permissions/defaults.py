"""
Default Permission Table

Applied to tenants that have not stored their own table. Each page grant is
written as a subset of "ved" (view, edit, delete).
"""

from typing import Any

from tenant_scope.contracts.permissions import PermissionTable

_PAGES = {
    "stock": ("dashboard", "items", "categories", "suppliers", "orders", "counts", "reports"),
    "pos": (
        "dashboard", "orders", "menu", "devices", "payments",
        "discounts", "categories", "locations", "settings",
    ),
    "hr": (
        "dashboard", "employees", "payroll", "timeoff", "performance", "recruitment",
        "training", "expenses", "incentives", "risk", "analytics",
    ),
    "bookings": ("dashboard", "calendar", "list", "reports", "settings", "tables"),
    "finance": ("dashboard", "accounting", "banking", "expenses", "reports", "budgeting"),
    "messenger": ("chat", "contacts", "groups"),
    "company": ("setup", "permissions", "checklist"),
    "tools": ("excel", "pdf", "floorfriend"),
}

# Department tables have no hr expenses/incentives/risk pages
_DEPARTMENT_HR_PAGES = (
    "dashboard", "employees", "payroll", "timeoff", "performance",
    "recruitment", "training", "analytics",
)


def _grants(codes: dict[str, str], hr_pages: tuple[str, ...] = _PAGES["hr"]) -> dict[str, Any]:
    """
    Expand per-module code strings (one code per page, space separated) into
    `{modules: {module: {page: {view, edit, delete}}}}`.
    """
    modules: dict[str, Any] = {}
    for module, line in codes.items():
        pages = hr_pages if module == "hr" else _PAGES[module]
        cells = line.split()
        if len(cells) != len(pages):
            raise ValueError(f"{module}: expected {len(pages)} codes, got {len(cells)}")
        modules[module] = {
            page: {"view": "v" in cell, "edit": "e" in cell, "delete": "d" in cell}
            for page, cell in zip(pages, cells)
        }
    return {"modules": modules}


def _uniform(code: str, hr_pages: tuple[str, ...] = _PAGES["hr"]) -> dict[str, Any]:
    codes = {}
    for module, pages in _PAGES.items():
        count = len(hr_pages) if module == "hr" else len(pages)
        codes[module] = " ".join([code] * count)
    return _grants(codes, hr_pages)


DEFAULT_PERMISSIONS_RAW: dict[str, Any] = {
    "roles": {
        "admin": _uniform("ved"),
        "manager": _grants({
            "stock": "ve ve ve ve ve ve v",
            "pos": "ve ve ve v v ve ve ve v",
            "hr": "ve ve ve ve ve ve ve ve ve ve v",
            "bookings": "ve ve ve v ve ve",
            "finance": "ve ve v ve v ve",
            "messenger": "ve ve ve",
            "company": "v - ve",
            "tools": "ve ve ve",
        }),
        "supervisor": _grants({
            "stock": "v ve v v ve ve v",
            "pos": "v ve v v v v v v v",
            "hr": "v v - ve ve - ve v - v v",
            "bookings": "v ve ve v v v",
            "finance": "v - - v v -",
            "messenger": "ve v v",
            "company": "- - v",
            "tools": "ve ve ve",
        }),
        "staff": _grants({
            "stock": "v v v - v ve -",
            "pos": "v ve v - - v v v -",
            "hr": "- - - ve v - v - - - -",
            "bookings": "v ve ve - - v",
            "finance": "- - - - - -",
            "messenger": "ve v v",
            "company": "- - v",
            "tools": "ve ve ve",
        }),
    },
    "departments": {
        "management": _uniform("ved", _DEPARTMENT_HR_PAGES),
        "kitchen": _grants({
            "stock": "v ve v v ve ve v",
            "pos": "v ve ve v - - ve v -",
            "hr": "- - - ve v - v -",
            "bookings": "v v v - - v",
            "finance": "- - - - - -",
            "messenger": "ve v v",
            "company": "- - v",
            "tools": "ve ve ve",
        }, _DEPARTMENT_HR_PAGES),
        "front-of-house": _grants({
            "stock": "v v v - v ve -",
            "pos": "v ve v v v ve v v -",
            "hr": "- - - ve v - v -",
            "bookings": "v ve ve - - ve",
            "finance": "- - - - - -",
            "messenger": "ve v v",
            "company": "- - v",
            "tools": "ve ve ve",
        }, _DEPARTMENT_HR_PAGES),
        "administration": _uniform("ve", _DEPARTMENT_HR_PAGES),
    },
    "defaultRole": "staff",
    "defaultDepartment": "front-of-house",
}


def default_permission_table() -> PermissionTable:
    """A fresh copy of the default table."""
    return PermissionTable.from_raw(DEFAULT_PERMISSIONS_RAW)
