"""
Tests for ProductDao against an in-memory database.
"""

import pytest

from backend.dao.product_dao import ProductDao
from backend.models.enums import Brand, Size
from backend.models.schema import Product
from services.exceptions import DuplicateProductError


class TestQueries:
    """Test read operations."""

    def test_find_all(self, session, products, insert_products):
        insert_products(products)

        found = ProductDao(session).find_all()

        assert [p.article for p in found] == [120589, 120590, 120591]

    def test_find_by_name_or_brand_is_a_union(self, session, products, insert_products):
        insert_products(products)
        dao = ProductDao(session)

        found = dao.find_by_name_or_brand('AAA', Brand.ENGLISH_LAUNDRY)

        assert {p.name for p in found} == {'AAA', 'CCC'}

    def test_find_by_name_only(self, session, products, insert_products):
        insert_products(products)

        found = ProductDao(session).find_by_name_or_brand('BBB', None)

        assert [p.article for p in found] == [120590]

    def test_find_by_brand_only(self, session, products, insert_products):
        insert_products(products)

        found = ProductDao(session).find_by_name_or_brand(None, Brand.DOLCE)

        assert {p.name for p in found} == {'AAA', 'BBB'}

    def test_find_without_criteria(self, session, products, insert_products):
        insert_products(products)

        assert ProductDao(session).find_by_name_or_brand(None, None) == []

    def test_find_by_quantity_lte(self, session, products, insert_products):
        insert_products(products)
        dao = ProductDao(session)

        assert [p.quantity for p in dao.find_by_quantity_lte(5)] == [3]
        assert [p.quantity for p in dao.find_by_quantity_lte(6)] == [3, 6]
        assert dao.find_by_quantity_lte(2) == []

    def test_find_by_article_and_size(self, session, products, insert_products):
        insert_products(products)
        dao = ProductDao(session)

        assert dao.find_by_article_and_size(120589, Size.SIZE_50).name == 'AAA'
        assert dao.find_by_article_and_size(120589, Size.SIZE_100) is None


class TestInsert:
    """Test inserts and the article/size uniqueness."""

    def test_insert(self, session, products):
        dao = ProductDao(session)

        dao.insert(products)
        session.commit()

        assert session.query(Product).count() == 3

    def test_same_article_different_size(self, session, products, insert_products, mock_product):
        insert_products(products)

        ProductDao(session).insert([
            mock_product(120589, 'AAA', Brand.DOLCE, 12, 1, Size.SIZE_100)
        ])
        session.commit()

        assert session.query(Product).filter_by(article=120589).count() == 2

    def test_duplicate_article_and_size(self, session, products, insert_products, mock_product):
        insert_products(products)

        with pytest.raises(DuplicateProductError):
            ProductDao(session).insert([
                mock_product(120589, 'Other', Brand.GUCCI, 1, 1, Size.SIZE_50)
            ])
        session.rollback()


class TestAddQuantity:
    """Test the atomic quantity increment."""

    def test_adds_delta(self, session, products, insert_products):
        insert_products(products)
        dao = ProductDao(session)

        updated = dao.add_quantity(120589, Size.SIZE_50, 7, 'admin')
        session.commit()

        assert updated == 1
        product = dao.find_by_article_and_size(120589, Size.SIZE_50)
        assert product.quantity == 16
        assert product.version == 1
        assert product.last_modified_by == 'admin'
        assert product.created_by == 'tester'

    def test_repeated_deltas_accumulate(self, session, products, insert_products):
        insert_products(products)
        dao = ProductDao(session)

        dao.add_quantity(120590, Size.SIZE_100, 21, 'admin')
        dao.add_quantity(120590, Size.SIZE_100, 1, 'admin')
        session.commit()

        product = dao.find_by_article_and_size(120590, Size.SIZE_100)
        assert product.quantity == 28
        assert product.version == 2

    def test_no_match(self, session, products, insert_products):
        insert_products(products)

        assert ProductDao(session).add_quantity(1647, Size.SIZE_50, 79, 'admin') == 0

    def test_size_is_part_of_the_key(self, session, products, insert_products):
        insert_products(products)

        assert ProductDao(session).add_quantity(120589, Size.SIZE_100, 5, 'admin') == 0


def test_delete_all(session, products, insert_products):
    insert_products(products)
    dao = ProductDao(session)

    assert dao.delete_all() == 3
    session.commit()
    assert dao.find_all() == []
