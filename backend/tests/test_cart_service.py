"""
Unit tests for cart service.

Tests add/merge, quantity updates, removal, clearing and totals.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest

from conftest import product_fields
from domain.errors import NotFoundError
from services import cart_service, catalog_service


@pytest.mark.asyncio
async def test_add_item_creates_line(db_session, customer, sample_product):
    items = await cart_service.add_item(db_session, user_id=customer.id, product_id=sample_product.id, quantity=2)
    assert len(items) == 1
    assert items[0].quantity == 2
    assert items[0].product.name == sample_product.name


@pytest.mark.asyncio
async def test_adding_same_product_merges_quantity(db_session, customer, sample_product):
    await cart_service.add_item(db_session, user_id=customer.id, product_id=sample_product.id, quantity=1)
    items = await cart_service.add_item(db_session, user_id=customer.id, product_id=sample_product.id, quantity=3)
    assert len(items) == 1
    assert items[0].quantity == 4


@pytest.mark.asyncio
async def test_add_inactive_product_404(db_session, customer, sample_product):
    await catalog_service.soft_delete_product(db_session, product_id=sample_product.id)
    with pytest.raises(NotFoundError):
        await cart_service.add_item(db_session, user_id=customer.id, product_id=sample_product.id)


@pytest.mark.asyncio
async def test_add_missing_product_404(db_session, customer):
    with pytest.raises(NotFoundError):
        await cart_service.add_item(db_session, user_id=customer.id, product_id=12345)


@pytest.mark.asyncio
async def test_update_quantity_and_zero_removes(db_session, customer, sample_product):
    await cart_service.add_item(db_session, user_id=customer.id, product_id=sample_product.id)
    items = await cart_service.update_quantity(
        db_session, user_id=customer.id, product_id=sample_product.id, quantity=7
    )
    assert items[0].quantity == 7

    items = await cart_service.update_quantity(
        db_session, user_id=customer.id, product_id=sample_product.id, quantity=0
    )
    assert items == []


@pytest.mark.asyncio
async def test_update_quantity_for_missing_line_404(db_session, customer, sample_product):
    with pytest.raises(NotFoundError):
        await cart_service.update_quantity(
            db_session, user_id=customer.id, product_id=sample_product.id, quantity=2
        )


@pytest.mark.asyncio
async def test_carts_are_per_user(db_session, customer, other_customer, sample_product):
    await cart_service.add_item(db_session, user_id=customer.id, product_id=sample_product.id)
    assert await cart_service.get_items(db_session, user_id=other_customer.id) == []


@pytest.mark.asyncio
async def test_remove_and_clear(db_session, customer, sample_product, sample_category):
    other = await catalog_service.create_product(
        db_session, category_id=sample_category.id, **product_fields(sku="OTHER", price=5.0)
    )
    await cart_service.add_item(db_session, user_id=customer.id, product_id=sample_product.id)
    await cart_service.add_item(db_session, user_id=customer.id, product_id=other.id)

    items = await cart_service.remove_item(db_session, user_id=customer.id, product_id=sample_product.id)
    assert [i.product_id for i in items] == [other.id]

    # removing a line that is not there is a no-op
    items = await cart_service.remove_item(db_session, user_id=customer.id, product_id=sample_product.id)
    assert len(items) == 1

    await cart_service.clear(db_session, user_id=customer.id)
    assert await cart_service.get_items(db_session, user_id=customer.id) == []


@pytest.mark.asyncio
async def test_clear_only_given_products(db_session, customer, sample_product, sample_category):
    other = await catalog_service.create_product(
        db_session, category_id=sample_category.id, **product_fields(sku="OTHER")
    )
    await cart_service.add_item(db_session, user_id=customer.id, product_id=sample_product.id)
    await cart_service.add_item(db_session, user_id=customer.id, product_id=other.id)

    await cart_service.clear(db_session, user_id=customer.id, product_ids=[sample_product.id])
    items = await cart_service.get_items(db_session, user_id=customer.id)
    assert [i.product_id for i in items] == [other.id]


@pytest.mark.asyncio
async def test_totals(db_session, customer, sample_product, sample_category):
    other = await catalog_service.create_product(
        db_session, category_id=sample_category.id, **product_fields(sku="CHEAP", price=0.1)
    )
    await cart_service.add_item(db_session, user_id=customer.id, product_id=sample_product.id, quantity=2)
    items = await cart_service.add_item(db_session, user_id=customer.id, product_id=other.id, quantity=3)

    totals = cart_service.get_totals(items)
    assert totals == {"totalItems": 5, "totalPrice": 40.3}


@pytest.mark.unit
def test_totals_of_empty_cart():
    assert cart_service.get_totals([]) == {"totalItems": 0, "totalPrice": 0.0}
