"""Integration tests for the precinct importer against SQLite."""

import io

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from election_importer.models.precinct import Precinct
from election_importer.schemas.imports import RowError
from election_importer.services.precinct_import_service import import_precincts

HEADER = "CountyCode,CountyName,DistrictType,DistrictCode,DistrictName,PrecinctCode,PrecinctName,PrecinctPart\n"

ROWS = (
    "17,KING,LEG,34,LEGISLATIVE DISTRICT 34,1001,SEA 34-1001,1\n"
    "17,KING,LEG,34,LEGISLATIVE DISTRICT 34,1002,SEA 34-1002,2\n"
    "27,PIERCE,CONG,6,CONGRESSIONAL DISTRICT 6,2001,TAC 27-2001,1\n"
)


def _stream(content: str) -> io.BytesIO:
    return io.BytesIO(content.encode("utf-8"))


async def _precinct_codes(session: AsyncSession) -> list[str]:
    result = await session.execute(select(Precinct.precinct_code).order_by(Precinct.precinct_code))
    return list(result.scalars().all())


class TestImportPrecincts:
    """Tests for import_precincts."""

    @pytest.mark.asyncio
    async def test_imports_all_rows(self, async_session: AsyncSession) -> None:
        outcome = await import_precincts(async_session, _stream(HEADER + ROWS))

        assert outcome.success
        assert outcome.count == 3
        assert outcome.message == "Successfully imported 3 precincts"
        assert await _precinct_codes(async_session) == ["1001", "1002", "2001"]

    @pytest.mark.asyncio
    async def test_import_replaces_previous_rows(self, async_session: AsyncSession) -> None:
        await import_precincts(async_session, _stream(HEADER + ROWS))
        replacement = HEADER + "17,KING,LEG,34,LEGISLATIVE DISTRICT 34,1001,SEA 34-1001,1\n"

        outcome = await import_precincts(async_session, _stream(replacement))

        assert outcome.count == 1
        assert await _precinct_codes(async_session) == ["1001"]

    @pytest.mark.asyncio
    async def test_header_only_empties_table(self, async_session: AsyncSession) -> None:
        await import_precincts(async_session, _stream(HEADER + ROWS))

        outcome = await import_precincts(async_session, _stream(HEADER))

        assert outcome.success
        assert outcome.count == 0
        assert await _precinct_codes(async_session) == []

    @pytest.mark.asyncio
    async def test_values_truncated_to_column_widths(self, async_session: AsyncSession) -> None:
        long_county = "K" * 120
        content = HEADER + f"17,{long_county},LEG,34,LD 34,1001,SEA 34-1001,1\n"

        outcome = await import_precincts(async_session, _stream(content))

        assert outcome.success
        stored = (await async_session.execute(select(Precinct.county_name))).scalar_one()
        assert stored == "K" * 100

        content = HEADER + f"{'1' * 15},KING,LEG,34,LD 34,1001,SEA 34-1001,1\n"
        await import_precincts(async_session, _stream(content))
        county_code = (await async_session.execute(select(Precinct.county_code))).scalar_one()
        assert county_code == "1" * 10

    @pytest.mark.asyncio
    async def test_extra_columns_ignored(self, async_session: AsyncSession) -> None:
        content = HEADER + "17,KING,LEG,34,LD 34,1001,SEA 34-1001,1,EXTRA,MORE\n"
        outcome = await import_precincts(async_session, _stream(content))
        assert outcome.success
        assert outcome.count == 1


class TestImportPrecinctsRollback:
    """Failed imports leave the previous table intact."""

    @pytest.mark.asyncio
    async def test_short_row_rolls_back(self, async_session: AsyncSession) -> None:
        await import_precincts(async_session, _stream(HEADER + ROWS))
        broken = HEADER + "17,KING,LEG,34,LD 34,1001,SEA 34-1001,1\n17,KING,LEG\n"

        outcome = await import_precincts(async_session, _stream(broken))

        assert not outcome.success
        assert outcome.count == 0
        assert outcome.errors == [RowError(line=3, message="Expected 8 fields, found 3")]
        assert await _precinct_codes(async_session) == ["1001", "1002", "2001"]

    @pytest.mark.asyncio
    async def test_duplicate_key_is_row_error(self, async_session: AsyncSession) -> None:
        duplicated = HEADER + ROWS + "17,KING,LEG,34,LEGISLATIVE DISTRICT 34,9999,DUPLICATE,1\n"

        outcome = await import_precincts(async_session, _stream(duplicated))

        assert not outcome.success
        assert len(outcome.errors) == 1
        assert outcome.errors[0].line == 5
        assert outcome.errors[0].message.startswith("Insert failed:")
        count = (await async_session.execute(select(func.count()).select_from(Precinct))).scalar_one()
        assert count == 0
