from dataclasses import dataclass

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import Badge, Level, Scenario, ScenarioStep, User


@dataclass
class Catalog:
    level1: int
    level2: int
    level3: int
    four_step: int  # level 1, answers A B C D
    single_a: int  # level 1, answer A
    single_b: int  # level 1, answer B
    level2_scenario: int  # answer C
    empty_scenario: int  # level 2, no steps
    badge1: int


async def add_level(db, title, order, level_id=None):
    level = Level(id=level_id, title=title, difficulty_order=order)
    db.add(level)
    await db.flush()
    return level


async def add_scenario(db, level_id, correct_labels, title="Scenario"):
    scenario = Scenario(level_id=level_id, title=title)
    db.add(scenario)
    await db.flush()
    for order, label in enumerate(correct_labels, start=1):
        db.add(ScenarioStep(
            scenario_id=scenario.id,
            step_order=order,
            question_text=f"Question {order}",
            option_a="a", option_b="b", option_c="c", option_d="d",
            correct_action=label,
        ))
    await db.flush()
    return scenario


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def catalog(db) -> Catalog:
    level1 = await add_level(db, "Basics", 1)
    level2 = await add_level(db, "Bleeding", 2)
    level3 = await add_level(db, "Empty", 3)

    four_step = await add_scenario(db, level1.id, ["A", "B", "C", "D"], "Collapse")
    single_a = await add_scenario(db, level1.id, ["A"], "Cut")
    single_b = await add_scenario(db, level1.id, ["B"], "Burn")
    level2_scenario = await add_scenario(db, level2.id, ["C"], "Deep cut")
    empty_scenario = await add_scenario(db, level2.id, [], "Draft")

    badge1 = Badge(level_id=level1.id, name="First Responder", description="Basics done", icon_url="/b1.png")
    db.add(badge1)
    await db.commit()

    return Catalog(
        level1=level1.id,
        level2=level2.id,
        level3=level3.id,
        four_step=four_step.id,
        single_a=single_a.id,
        single_b=single_b.id,
        level2_scenario=level2_scenario.id,
        empty_scenario=empty_scenario.id,
        badge1=badge1.id,
    )


@pytest.fixture
async def user(db) -> User:
    user = User(full_name="Alex Doe", email="alex@example.com", hashed_password="x")
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def build():
    """Catalog builders for tests that need their own levels and scenarios."""

    class Builders:
        level = staticmethod(add_level)
        scenario = staticmethod(add_scenario)

    return Builders
