"""
Category Management Tool Handler

Tools:
- manage_category: Create, rename, delete or list the caller's categories

Default categories are visible to everyone and can be listed but never
renamed or deleted.
"""

from typing import List, Optional

from tools.finance.categories import CATEGORY_NAME_MAP
from tools.finance.services import Category, FinanceServices, RecordNotFoundError
from tools.responses import tool_failure, tool_response
from tools.schemas import ManageCategoryInput, ToolError


def find_category(categories: List[Category], name: str, type: Optional[str] = None) -> Optional[Category]:
    """
    Resolve a category by id, display name or category word.

    The caller's own categories win over defaults with the same name.
    """
    key = name.strip().lower()
    mapped = CATEGORY_NAME_MAP.get(key)

    for category in sorted(categories, key=lambda c: c.is_default):
        if type and category.type != type:
            continue
        if key in (category.id, category.name.lower()) or category.id == mapped:
            return category
    return None


def _summary(category: Category) -> dict:
    return {"id": category.id, "name": category.name, "is_default": category.is_default}


def make_manage_category(services: FinanceServices):

    def create(data: ManageCategoryInput, caller_id: str):
        if not data.category_name:
            return tool_failure(ToolError.MISSING_PARAMETERS, "Category name is required for creation")

        visible = services.categories.list_categories(caller_id)
        existing = find_category(visible, data.category_name, data.category_type)
        if existing:
            return tool_failure(
                ToolError.CATEGORY_EXISTS,
                f'Category "{existing.name}" already exists',
                meta={"category_id": existing.id}
            )

        category = services.categories.create_category(caller_id, data.category_name, data.category_type)
        return tool_response(
            success=True,
            data=category,
            message=f'Category "{category.name}" created successfully',
            meta={"action": "created"}
        )

    def _resolve_own(data: ManageCategoryInput, caller_id: str):
        """(category, None) for a caller-owned category, else (None, failure)"""
        category = find_category(services.categories.list_categories(caller_id), data.category_name)
        if category is None:
            return None, tool_failure(
                ToolError.CATEGORY_NOT_FOUND,
                f'Category "{data.category_name}" not found'
            )
        if category.is_default:
            return None, tool_failure(
                ToolError.CANNOT_MODIFY_DEFAULT,
                "Default categories cannot be renamed or deleted"
            )
        return category, None

    def update(data: ManageCategoryInput, caller_id: str):
        if not data.category_name or not data.new_category_name:
            return tool_failure(
                ToolError.MISSING_PARAMETERS,
                "Both current and new category names are required for update"
            )

        category, failure = _resolve_own(data, caller_id)
        if failure:
            return failure

        try:
            renamed = services.categories.rename_category(category.id, caller_id, data.new_category_name)
        except RecordNotFoundError:
            return tool_failure(ToolError.CATEGORY_NOT_FOUND, f'Category "{data.category_name}" not found')

        return tool_response(
            success=True,
            data=renamed,
            message=f'Category renamed from "{category.name}" to "{renamed.name}"',
            meta={"action": "updated"}
        )

    def delete(data: ManageCategoryInput, caller_id: str):
        if not data.category_name:
            return tool_failure(ToolError.MISSING_PARAMETERS, "Category name is required for deletion")

        category, failure = _resolve_own(data, caller_id)
        if failure:
            return failure

        try:
            services.categories.delete_category(category.id, caller_id)
        except RecordNotFoundError:
            return tool_failure(ToolError.CATEGORY_NOT_FOUND, f'Category "{data.category_name}" not found')

        return tool_response(
            success=True,
            data={"id": category.id, "name": category.name},
            message=f'Category "{category.name}" deleted successfully',
            meta={"action": "deleted"}
        )

    def list_all(data: ManageCategoryInput, caller_id: str):
        categories = services.categories.list_categories(caller_id)
        expense = [_summary(c) for c in categories if c.type == "EXPENSE"]
        income = [_summary(c) for c in categories if c.type == "INCOME"]

        return tool_response(
            success=True,
            data={
                "expense_categories": expense,
                "income_categories": income,
                "total": len(categories),
            },
            message=f"Found {len(categories)} categories ({len(expense)} expense, {len(income)} income)",
            meta={"action": "listed"}
        )

    actions = {
        "create": create,
        "update": update,
        "delete": delete,
        "list": list_all,
    }

    def manage_category(data: ManageCategoryInput, caller_id: str):
        return actions[data.action](data, caller_id)

    return manage_category
