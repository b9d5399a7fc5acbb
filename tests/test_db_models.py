"""Tests for SQLAlchemy ORM models.

Validates that both tables are registered, the id and price columns have the
types the upsert relies on, and the required indexes exist.
"""

from sqlalchemy import BigInteger, Numeric, String
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

from menu_ingest.models.db import Base, MenuItemRow, MenuUpdateRow


class TestAllTablesRegistered:
    def test_table_names(self):
        assert set(Base.metadata.tables) == {"menu_items", "menu_updates"}


class TestMenuItemRow:
    def test_string_primary_key(self):
        table = MenuItemRow.__table__
        assert [c.name for c in table.primary_key.columns] == ["id"]
        assert isinstance(table.c.id.type, String)

    def test_price_is_nullable_numeric_as_float(self):
        price = MenuItemRow.__table__.c.price
        assert price.nullable is True
        assert isinstance(price.type, Numeric)
        assert price.type.asdecimal is False

    def test_tags_array(self):
        assert isinstance(MenuItemRow.__table__.c.tags.type, ARRAY)

    def test_indexes(self):
        names = {index.name for index in MenuItemRow.__table__.indexes}
        assert names == {
            "idx_menu_items_category",
            "idx_menu_items_available",
            "idx_menu_items_updated",
        }


class TestMenuUpdateRow:
    def test_identity_primary_key(self):
        column = MenuUpdateRow.__table__.c.id
        assert column.primary_key
        assert isinstance(column.type, BigInteger)
        assert column.identity is not None

    def test_changes_is_jsonb(self):
        assert isinstance(MenuUpdateRow.__table__.c.changes.type, JSONB)

    def test_indexes(self):
        names = {index.name for index in MenuUpdateRow.__table__.indexes}
        assert names == {
            "idx_menu_updates_user_id",
            "idx_menu_updates_menu_type",
            "idx_menu_updates_created_at",
        }
