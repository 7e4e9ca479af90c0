"""초기 데이터 시드 스크립트 — 역할, 관리자 계정, 샘플 카테고리/브랜드 생성.

Seed script — Creates the role hierarchy, the first admin account and a
starter set of categories and brands.

Usage:
    python -m tawatch.seed

Creates:
    - 3개 역할: admin(1), staff(2), customer(3) (3 roles)
    - 1개 관리자 계정: admin@tawatch.vn / admin123 (1 admin user)
    - 샘플 카테고리 및 브랜드 (Sample categories and brands)

Idempotent: 각 항목은 없을 때만 생성 (each row is created only when missing).
"""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tawatch.database import Base, async_session, engine
from tawatch.models import Brand, Category, Role, User
from tawatch.models.user import ROLE_ADMIN, ROLE_LEVELS
from tawatch.utils.password import hash_password
from tawatch.utils.slug import slugify

ADMIN_EMAIL: str = "admin@tawatch.vn"
ADMIN_PASSWORD: str = "admin123"

# 카테고리 트리 — (name, children)
CATEGORIES: list[tuple[str, list[str]]] = [
    ("Đồng hồ nam", ["Đồng hồ cơ", "Đồng hồ pin", "Đồng hồ thông minh"]),
    ("Đồng hồ nữ", ["Đồng hồ thời trang", "Đồng hồ đính đá"]),
    ("Phụ kiện", ["Dây đồng hồ", "Hộp đựng đồng hồ"]),
]

# 브랜드 — (name, country)
BRANDS: list[tuple[str, str]] = [
    ("Seiko", "Japan"),
    ("Casio", "Japan"),
    ("Citizen", "Japan"),
    ("Orient", "Japan"),
    ("Tissot", "Switzerland"),
]


async def _seed_roles(db: AsyncSession) -> dict[str, Role]:
    """역할 생성 — Create missing roles (admin=1, staff=2, customer=3)."""
    existing = {r.name: r for r in (await db.execute(select(Role))).scalars().all()}
    for name, level in ROLE_LEVELS.items():
        if name not in existing:
            role: Role = Role(name=name, level=level)
            db.add(role)
            existing[name] = role
    await db.flush()
    return existing


async def _seed_categories(db: AsyncSession) -> int:
    existing = set((await db.execute(select(Category.slug))).scalars().all())
    created: int = 0
    for sort_order, (name, children) in enumerate(CATEGORIES):
        slug = slugify(name)
        parent = (await db.execute(select(Category).where(Category.slug == slug))).scalar_one_or_none()
        if parent is None:
            parent = Category(name=name, slug=slug, sort_order=sort_order)
            db.add(parent)
            await db.flush()
            created += 1
        for child_order, child_name in enumerate(children):
            child_slug = slugify(child_name)
            if child_slug in existing:
                continue
            db.add(Category(name=child_name, slug=child_slug, parent_id=parent.id, sort_order=child_order))
            existing.add(child_slug)
            created += 1
    await db.flush()
    return created


async def _seed_brands(db: AsyncSession) -> int:
    existing = set((await db.execute(select(Brand.slug))).scalars().all())
    created: int = 0
    for name, country in BRANDS:
        slug = slugify(name)
        if slug in existing:
            continue
        db.add(Brand(name=name, slug=slug, country=country))
        created += 1
    await db.flush()
    return created


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with initial data. Creates tables if they don't
    exist (use Alembic for real deployments), then inserts whatever is
    missing.
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        roles: dict[str, Role] = await _seed_roles(db)

        admin = (await db.execute(select(User).where(User.email == ADMIN_EMAIL))).scalar_one_or_none()
        if admin is None:
            db.add(
                User(
                    role_id=roles[ROLE_ADMIN].id,
                    email=ADMIN_EMAIL,
                    full_name="Tawatch Admin",
                    password_hash=hash_password(ADMIN_PASSWORD),
                    is_active=True,
                    email_verified=True,
                )
            )
            print(f"Created admin user {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
        else:
            print("Admin user already exists. Skipping.")

        categories: int = await _seed_categories(db)
        brands: int = await _seed_brands(db)

        await db.commit()
        print(f"Seeded: roles={len(roles)}, new categories={categories}, new brands={brands}")


if __name__ == "__main__":
    asyncio.run(seed())
