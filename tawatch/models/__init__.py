"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 역할, 사용자, 배송지 (Role, User, Address)
    token: 리프레시 토큰 (Refresh tokens)
    catalog: 카테고리, 브랜드, 상품, 상품 이미지 (Category, Brand, Product, ProductImage)
    inventory: 재고 변동 이력 (Inventory ledger)
    cart: 장바구니 (Cart, CartItem)
    coupon: 쿠폰 및 사용 이력 (Coupon, CouponUsage)
    order: 주문, 항목, 상태 이력 (Order, OrderItem, OrderStatusHistory)
    payment: 결제 시도 (Payment attempts)
    review: 상품 리뷰 (Product reviews)
"""

from tawatch.models.user import Role, User, Address
from tawatch.models.token import RefreshToken
from tawatch.models.catalog import Category, Brand, Product, ProductImage
from tawatch.models.inventory import InventoryTransaction
from tawatch.models.cart import Cart, CartItem
from tawatch.models.coupon import Coupon, CouponUsage
from tawatch.models.order import Order, OrderItem, OrderStatusHistory
from tawatch.models.payment import Payment
from tawatch.models.review import Review

__all__ = [
    "Role", "User", "Address",
    "RefreshToken",
    "Category", "Brand", "Product", "ProductImage",
    "InventoryTransaction",
    "Cart", "CartItem",
    "Coupon", "CouponUsage",
    "Order", "OrderItem", "OrderStatusHistory",
    "Payment",
    "Review",
]
