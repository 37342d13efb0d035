"""Category list page."""

from typing import Tuple

from models import Category, CategoryInput, Role
from services.exceptions import InvalidInputError
from utils.decorators import require_role, single_flight, view_action
from utils.messages import translate

from .base import BaseHandler


class CategoryListHandler(BaseHandler):
    def __init__(self, session, client, confirm=None):
        super().__init__(session, client, confirm)
        self.categories: Tuple[Category, ...] = ()

    @view_action()
    @require_role()
    def load(self) -> None:
        self.categories = self.gateway.fetch_categories()

    @view_action(success="category_added")
    @single_flight
    @require_role(Role.ADMIN)
    def add_category(self, name: str) -> None:
        """Create a category; the name is trimmed and must not be empty."""
        name = (name or "").strip()
        if not name:
            raise InvalidInputError(translate("category_name_required"))
        self.client.create_category(CategoryInput(name=name))
        with self.refreshing():
            self.categories = self.gateway.fetch_categories()

    @view_action(success="category_deleted")
    @require_role(Role.ADMIN)
    def delete_category(self, category_id: str) -> None:
        self.require_confirmation("confirm_delete_category")
        self.client.delete_category(category_id)
        with self.refreshing():
            self.categories = self.gateway.fetch_categories()
