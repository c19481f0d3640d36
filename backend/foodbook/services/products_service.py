# backend/foodbook/services/products_service.py
"""
Products Service with Multi-Tenant Support

MULTI-TENANT: All catalog operations are tenant-scoped.
- list_products returns only the tenant's products
- update_product and delete_product report other tenants' products as NotFound
- list_public_menu resolves the tenant from the owner email for guest ordering

Stock changes driven by orders and bills do NOT go through here; see
inventory_service.
"""
from __future__ import annotations

from flask import current_app

from ..errors import NotFound
from ..extensions import db
from ..models import Owner, OrderLine, Product
from .tenant_service import TenantContext, scoped_query

PRODUCT_MUTABLE_FIELDS = {"name", "description", "category", "image_url", "price", "stock"}

TEMPLATE_PRODUCTS = [
    {
        "name": "Classic Burger",
        "category": "Food",
        "price": 150,
        "stock": 50,
        "description": "Juicy beef patty with fresh lettuce and cheese.",
        "image_url": "/images/burger.png",
    },
    {
        "name": "Margherita Pizza",
        "category": "Food",
        "price": 300,
        "stock": 20,
        "description": "Classic tomato and mozzarella pizza with basil.",
        "image_url": "/images/pizza.png",
    },
    {
        "name": "Coca Cola",
        "category": "Beverage",
        "price": 40,
        "stock": 100,
        "description": "Chilled soft drink with ice.",
        "image_url": "/images/coke.png",
    },
    {
        "name": "French Fries",
        "category": "Sides",
        "price": 80,
        "stock": 40,
        "description": "Crispy golden salted fries.",
        "image_url": "/images/french_fries_crispy.png",
    },
    {
        "name": "Chocolate Brownie",
        "category": "Dessert",
        "price": 120,
        "stock": 15,
        "description": "Rich chocolate fudge brownie with ice cream.",
        "image_url": "/images/brownie.png",
    },
]


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products(tenant: TenantContext, category: str | None = None) -> list[Product]:
    query = scoped_query(Product, tenant)
    if category:
        query = query.filter(Product.category == category)
    return query.order_by(Product.category.asc(), Product.name.asc(), Product.id.asc()).all()


def list_public_menu(owner_email: str) -> list[Product]:
    """Menu a guest sees when ordering from a restaurant."""
    owner = db.session.query(Owner).filter_by(email=owner_email.strip().lower(), is_active=True).first()
    if owner is None:
        raise NotFound("Restaurant not found")
    return list_products(TenantContext.for_owner(owner))


def get_product(tenant: TenantContext, product_id: int) -> Product:
    product = scoped_query(Product, tenant).filter(Product.id == product_id).first()
    if product is None:
        raise NotFound("Product not found", details={"product_id": product_id})
    return product


def create_product(tenant: TenantContext, patch: dict) -> Product:
    """Create product using a validated patch dict."""
    product = Product(owner_id=tenant.owner_id, stock=0)
    apply_product_patch(product, patch)
    db.session.add(product)
    db.session.commit()
    current_app.logger.info("Product %s created for owner_id=%s", product.id, tenant.owner_id)
    return product


def update_product(tenant: TenantContext, product_id: int, patch: dict) -> Product:
    """
    Update catalog fields. Existing orders keep their snapshotted name and
    price; only future orders see the change.
    """
    product = get_product(tenant, product_id)
    apply_product_patch(product, patch)
    db.session.commit()
    return product


def delete_product(tenant: TenantContext, product_id: int) -> None:
    """
    Remove a product from the menu.

    Order history is kept: lines referencing the product keep their name and
    price snapshot and lose only the product reference.
    """
    product = get_product(tenant, product_id)
    db.session.query(OrderLine).filter(OrderLine.product_id == product.id).update(
        {OrderLine.product_id: None}, synchronize_session="fetch"
    )
    db.session.delete(product)
    db.session.commit()
    current_app.logger.info("Product %s deleted for owner_id=%s", product_id, tenant.owner_id)


def seed_default_products(tenant: TenantContext) -> int:
    """
    Give a fresh tenant a starter menu.

    Idempotent: does nothing when the tenant already has products.
    Returns the number of products created.
    """
    if scoped_query(Product, tenant).count() > 0:
        current_app.logger.info("Seeder skipped: owner_id=%s already has products", tenant.owner_id)
        return 0

    for template in TEMPLATE_PRODUCTS:
        db.session.add(Product(owner_id=tenant.owner_id, **template))
    db.session.commit()

    current_app.logger.info(
        "Seeded %s default products for owner_id=%s", len(TEMPLATE_PRODUCTS), tenant.owner_id
    )
    return len(TEMPLATE_PRODUCTS)
