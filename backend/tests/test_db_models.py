"""
Tests for ORM database models.

Tests: Model creation, relationships, column constraints, defaults.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from db_models import CartItem, Category, Order, OrderItem, Product, User


class TestUserModel:

    @pytest.mark.integration
    async def test_create_user_defaults(self, db_session):
        user = User(name="Casey", email="casey@example.com", password_hash="x")
        db_session.add(user)
        await db_session.commit()

        fetched = (await db_session.execute(select(User).where(User.email == "casey@example.com"))).scalar_one()
        assert fetched.role == "customer"
        assert fetched.is_active is True
        assert fetched.last_login is None
        assert fetched.created_at is not None

    @pytest.mark.integration
    async def test_email_is_unique(self, db_session):
        db_session.add(User(name="A", email="dup@example.com", password_hash="x"))
        await db_session.commit()
        db_session.add(User(name="B", email="dup@example.com", password_hash="y"))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()


class TestCatalogModels:

    @pytest.mark.integration
    async def test_product_loads_its_category(self, db_session, sample_product, sample_category):
        res = await db_session.execute(
            select(Product).where(Product.id == sample_product.id).execution_options(populate_existing=True)
        )
        product = res.scalar_one()
        assert product.category.slug == sample_category.slug
        assert product.images == ["https://img.example/x1c.jpg"]
        assert product.specifications == {}

    @pytest.mark.integration
    async def test_sku_is_unique(self, db_session, sample_product, sample_category):
        db_session.add(
            Product(
                name="Clone", description="", price=1.0, condition="good",
                category_id=sample_category.id, brand="B", sku=sample_product.sku,
            )
        )
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()

    @pytest.mark.integration
    async def test_category_slug_is_unique(self, db_session, sample_category):
        db_session.add(Category(name="Other Laptops", slug=sample_category.slug))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()


class TestOrderModels:

    @pytest.mark.integration
    async def test_order_items_cascade_and_order(self, db_session, customer, sample_product):
        order = Order(
            user_id=customer.id,
            shipping_address={"firstName": "Casey"},
            payment_method="stripe",
            items=[
                OrderItem(product_id=sample_product.id, name="first", price=1.0, quantity=1),
                OrderItem(product_id=sample_product.id, name="second", price=2.0, quantity=2),
            ],
        )
        db_session.add(order)
        await db_session.commit()

        res = await db_session.execute(
            select(Order).where(Order.id == order.id).execution_options(populate_existing=True)
        )
        fetched = res.scalar_one()
        assert [i.name for i in fetched.items] == ["first", "second"]
        assert fetched.status == "pending"
        assert fetched.is_paid is False
        assert fetched.user.email == customer.email

        await db_session.delete(fetched)
        await db_session.commit()
        remaining = (await db_session.execute(select(OrderItem))).scalars().all()
        assert remaining == []


class TestCartItemModel:

    @pytest.mark.integration
    async def test_one_line_per_user_and_product(self, db_session, customer, sample_product):
        db_session.add(CartItem(user_id=customer.id, product_id=sample_product.id, quantity=1))
        await db_session.commit()
        db_session.add(CartItem(user_id=customer.id, product_id=sample_product.id, quantity=2))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()
