"""Integration tests for create_app database wiring."""

from sqlalchemy import select

from catalog.config import Settings
from catalog.kernel.models.user import User
from catalog.main import create_app


class TestCreateApp:
    """The app serves from the database it initialises."""

    async def test_engine_follows_settings_database_url(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'configured.db'}"
        app = create_app(settings=Settings(database_url=url))

        assert app.state.owns_engine is True
        assert app.state.session_factory.kw["bind"] is app.state.engine
        assert app.state.engine.url.database == str(tmp_path / "configured.db")

        async with app.router.lifespan_context(app):
            assert app.state.hub.bus.is_running
            async with app.state.session_factory() as session:
                result = await session.execute(select(User))
                assert result.scalars().all() == []

        assert (tmp_path / "configured.db").exists()

    async def test_injected_factory_is_used_for_init(self, db_engine, session_factory, owner):
        app = create_app(session_factory=session_factory)

        assert app.state.owns_engine is False
        assert app.state.engine is db_engine

        async with app.router.lifespan_context(app):
            async with app.state.session_factory() as session:
                users = (await session.execute(select(User))).scalars().all()

        assert [u.id for u in users] == [owner.id]
