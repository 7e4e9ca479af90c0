"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
Services enforce business rules, call repositories for DB operations and
may call other services for cross-domain logic (checkout uses inventory,
coupon and cart). They flush; routers commit.
"""
