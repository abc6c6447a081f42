"""BizDesk - Navigation menu endpoint."""
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.api.deps import AuthUser
from app.core.responses import success_response

router = APIRouter()

# entries are "item", "section" (titled group of items) or "divider"
MENU_ITEMS: list[dict] = [
    {"type": "item", "id": 1, "name": "Home", "path": "/", "icon": "bi-house"},
    {
        "type": "section",
        "title": "List",
        "items": [
            {"id": 20, "name": "Products", "path": "/list/products", "icon": "bi-calculator"},
        ],
    },
    {"type": "divider"},
    {
        "type": "section",
        "title": "Sales",
        "items": [
            {"id": 40, "name": "Estimate", "path": "/list/estimates", "icon": "bi-receipt"},
        ],
    },
    {"type": "divider"},
    {
        "type": "section",
        "title": "Administration",
        "items": [
            {"id": 60, "name": "Users", "path": "/list/users", "icon": "bi-people", "mode": "form"},
            {"id": 61, "name": "Estimate", "path": "/list/estimates", "icon": "bi-receipt", "mode": "doc"},
        ],
    },
    {"type": "divider"},
    {"type": "item", "id": 90, "name": "Help", "path": "/help", "icon": "bi-question-circle"},
]


@router.get("/menu")
async def menu(user: AuthUser) -> JSONResponse:
    """Navigation tree for the authenticated user."""
    return success_response(MENU_ITEMS, "Menu items retrieved successfully")
