import pytest

from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork


@pytest.mark.unit
class TestSqlAlchemyUnitOfWork:
    @pytest.mark.asyncio
    async def test_commit_outside_async_with_is_rejected(self) -> None:
        uow = SqlAlchemyUnitOfWork(lambda: pytest.fail('no session should be opened'))

        with pytest.raises(RuntimeError, match='outside `async with`'):
            await uow.commit()
