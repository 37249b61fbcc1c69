"""
Console menu and the role each screen requires.
"""

from typing import Any, Dict, List

from .session import Role, SessionStore


MENU = [
    {
        'title': 'Overview',
        'items': [
            {'title': 'Dashboard', 'page': 'dashboard', 'required_role': Role.STAFF},
        ],
    },
    {
        'title': 'Management',
        'items': [
            {'title': 'Employee Management', 'page': 'employees', 'required_role': Role.MANAGER},
            {'title': 'Partner & Vendors', 'page': 'partners', 'required_role': Role.MANAGER},
        ],
    },
    {
        'title': 'Operations',
        'items': [
            {'title': 'Weekly Upload', 'page': 'weekly-upload', 'required_role': Role.MANAGER},
            {'title': 'Deductions & Charges', 'page': 'deductions', 'required_role': Role.MANAGER},
            {'title': 'Salary Report', 'page': 'salary-report', 'required_role': Role.STAFF},
        ],
    },
    {
        'title': 'System',
        'items': [
            {'title': 'Settings', 'page': 'settings', 'required_role': Role.ADMIN},
        ],
    },
]

DEFAULT_PAGE = 'dashboard'

PAGE_ROLES = {
    item['page']: item['required_role']
    for group in MENU
    for item in group['items']
}


def resolve_page(page: str) -> str:
    """Unknown page keys fall back to the dashboard."""
    return page if page in PAGE_ROLES else DEFAULT_PAGE


def visible_menu(store: SessionStore) -> List[Dict[str, Any]]:
    """Menu groups filtered to the entries the session may open; empty groups are dropped."""
    groups = []
    for group in MENU:
        items = [
            {'title': item['title'], 'page': item['page'], 'required_role': item['required_role'].value}
            for item in group['items']
            if store.has_access(item['required_role'])
        ]
        if items:
            groups.append({'title': group['title'], 'items': items})
    return groups
