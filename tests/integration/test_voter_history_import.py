"""Integration tests for the voter history importer against SQLite."""

import io
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from election_importer.models.voter_history import VoterHistory
from election_importer.services.voter_history_service import NO_VOTERS_MESSAGE, import_voter_history
from election_importer.services.voter_import_service import import_voters

HEADER = "VoterHistoryID|CountyCode|CountyCodeVoting|StateVoterID|ElectionDate"


def _stream(*lines: str) -> io.BytesIO:
    return io.BytesIO(("\n".join([HEADER, *lines]) + "\n").encode("utf-8"))


async def _history_count(session: AsyncSession) -> int:
    return (await session.execute(select(func.count()).select_from(VoterHistory))).scalar_one()


class TestImportVoterHistory:
    """Tests for import_voter_history."""

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_imports_registered_voters(self, async_session: AsyncSession) -> None:
        outcome = await import_voter_history(
            async_session,
            _stream("H1|KI|KI|WA001|11/05/2024", "H2|KI|PI|WA002|2024-08-06"),
        )

        assert outcome.success
        assert (outcome.count, outcome.skipped) == (2, 0)
        assert outcome.message == "Successfully imported 2 voter history records (0 skipped)"

        record = (
            await async_session.execute(select(VoterHistory).where(VoterHistory.voter_history_id == "H2"))
        ).scalar_one()
        assert record.state_voter_id == "WA002"
        assert record.county_code == "KI"
        assert record.county_code_voting == "PI"
        assert record.election_date == date(2024, 8, 6)

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_orphan_rows_skipped(self, async_session: AsyncSession) -> None:
        outcome = await import_voter_history(
            async_session,
            _stream("H1|KI|KI|WA001|11/05/2024", "H2|KI|KI|WA999|11/05/2024"),
        )

        assert outcome.success
        assert (outcome.count, outcome.skipped) == (1, 1)
        assert outcome.errors == []
        assert await _history_count(async_session) == 1

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_reimport_fully_skipped(self, async_session: AsyncSession) -> None:
        lines = ("H1|KI|KI|WA001|11/05/2024", "H2|KI|KI|WA002|11/05/2024", "H3|KI|KI|WA003|11/05/2024")
        await import_voter_history(async_session, _stream(*lines))

        outcome = await import_voter_history(async_session, _stream(*lines))

        assert outcome.success
        assert (outcome.count, outcome.skipped) == (0, 3)
        assert await _history_count(async_session) == 3

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_duplicate_within_file_skipped(self, async_session: AsyncSession) -> None:
        outcome = await import_voter_history(
            async_session,
            _stream("H1|KI|KI|WA001|11/05/2024", "H1|KI|KI|WA001|11/05/2024"),
        )

        assert (outcome.count, outcome.skipped) == (1, 1)

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_small_batches(self, async_session: AsyncSession) -> None:
        lines = [f"H{i}|KI|KI|WA00{1 + i % 3}|11/05/2024" for i in range(7)]

        outcome = await import_voter_history(async_session, _stream(*lines), batch_size=2)

        assert (outcome.count, outcome.skipped) == (7, 0)
        assert await _history_count(async_session) == 7

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_unknown_or_blank_voter_skipped_despite_bad_date(self, async_session: AsyncSession) -> None:
        outcome = await import_voter_history(
            async_session,
            _stream("H1|KI|KI|WA001|11/05/2024", "H2|KI|KI|WA999|not-a-date", "H3|KI|KI||11/05/2024"),
        )

        assert outcome.success
        assert outcome.errors == []
        assert (outcome.count, outcome.skipped) == (1, 2)
        assert await _history_count(async_session) == 1

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_long_county_codes_truncated(self, async_session: AsyncSession) -> None:
        outcome = await import_voter_history(async_session, _stream("H1|KINGCOUNTYWA|PIERCECOUNTY|WA001|11/05/2024"))

        assert outcome.success
        row = (
            await async_session.execute(select(VoterHistory.county_code, VoterHistory.county_code_voting))
        ).one()
        assert tuple(row) == ("KINGCOUNTY", "PIERCECOUN")

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_large_batch_split_into_several_inserts(self, async_session: AsyncSession) -> None:
        lines = [f"H{i}|KI|KI|WA00{1 + i % 3}|11/05/2024" for i in range(5)]

        with patch("election_importer.services.voter_history_service._INSERT_CHUNK", 2):
            outcome = await import_voter_history(async_session, _stream(*lines), batch_size=10)

        assert outcome.success
        assert outcome.count == 5
        assert await _history_count(async_session) == 5

    @pytest.mark.asyncio
    async def test_history_survives_voter_replacement(self, async_session: AsyncSession) -> None:
        voter_header = "|".join(f"COL{i}" for i in range(32))
        first = "WA001" + "|" * 31
        second = "WA002" + "|" * 31
        await import_voters(async_session, io.BytesIO(f"{voter_header}\n{first}\n".encode()))
        await import_voter_history(async_session, _stream("H1|KI|KI|WA001|11/05/2024"))

        outcome = await import_voters(async_session, io.BytesIO(f"{voter_header}\n{second}\n".encode()))

        assert outcome.success
        assert await _history_count(async_session) == 1


class TestImportVoterHistoryErrors:
    """Errors roll back the whole history import."""

    @pytest.mark.asyncio
    async def test_no_voters_is_fatal(self, async_session: AsyncSession) -> None:
        stream = _stream("H1|KI|KI|WA001|11/05/2024")

        outcome = await import_voter_history(async_session, stream)

        assert not outcome.success
        assert [e.message for e in outcome.errors] == [NO_VOTERS_MESSAGE]
        assert outcome.errors[0].line is None
        assert await _history_count(async_session) == 0
        assert stream.closed

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_invalid_date_rolls_back(self, async_session: AsyncSession) -> None:
        outcome = await import_voter_history(
            async_session,
            _stream("H1|KI|KI|WA001|11/05/2024", "H2|KI|KI|WA002|13/45/2024"),
        )

        assert not outcome.success
        assert [str(e) for e in outcome.errors] == ["Line 3: Invalid date format: 13/45/2024"]
        assert outcome.count == 0
        assert await _history_count(async_session) == 0

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_short_row_rolls_back(self, async_session: AsyncSession) -> None:
        outcome = await import_voter_history(async_session, _stream("H1|KI|KI|WA001|11/05/2024", "H2|KI|KI"))

        assert not outcome.success
        assert outcome.errors[0].line == 3
        assert outcome.errors[0].message == "Expected 5 fields, found 3"
        assert await _history_count(async_session) == 0

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("registered_voters")
    async def test_failed_batch_is_one_error(self, async_session: AsyncSession) -> None:
        await import_voter_history(async_session, _stream("H1|KI|KI|WA001|11/05/2024"))

        # Bypass the stored-id check so the multi-row INSERT hits the unique constraint
        with patch(
            "election_importer.services.voter_history_service._existing_history_ids",
            new_callable=AsyncMock,
            return_value=set(),
        ):
            outcome = await import_voter_history(
                async_session,
                _stream("H2|KI|KI|WA002|11/05/2024", "H1|KI|KI|WA001|11/05/2024"),
            )

        assert not outcome.success
        assert len(outcome.errors) == 1
        assert outcome.errors[0].line is None
        assert outcome.errors[0].message.startswith("Batch insert failed near line 3:")
        assert await _history_count(async_session) == 1
