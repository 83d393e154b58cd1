import pytest

from core.constants import DEFAULT_ACTIVITIES
from core.database import DatabaseConnectionError, LocalBackend, NotAuthenticatedError, RecordNotFoundError
from core.models import IntimacyEntry, SleepEntry, JournalEntry, AIAnalysis
from core.repository import WellnessRepository

class BrokenBackend(LocalBackend):
    """Хранилище, у которого всегда недоступна сеть"""

    async def select(self, table, filters=None, order=None, limit=None):
        raise DatabaseConnectionError("offline")

    async def insert(self, table, rows):
        raise DatabaseConnectionError("offline")

async def test_init_database_seeds_once(repository, backend):
    await repository.init_database()
    activities = await repository.get_activities()
    assert len(activities) == len(DEFAULT_ACTIVITIES)
    assert len(await backend.select('activities')) == len(DEFAULT_ACTIVITIES)

async def test_writes_require_user(backend):
    anonymous = WellnessRepository(backend)
    with pytest.raises(NotAuthenticatedError):
        await anonymous.insert_mood_entry(3, "2024-03-01")

async def test_reads_without_user_return_empty(backend):
    anonymous = WellnessRepository(backend)
    assert await anonymous.get_mood_entries() == []
    assert await anonymous.get_sleep_entry_for_date("2024-03-01") is None

async def test_reads_swallow_backend_errors(tmp_path):
    broken = BrokenBackend(tmp_path / "db.json")
    repository = WellnessRepository(broken, "u1")
    assert await repository.get_mood_entries() == []
    assert await repository.get_activities() == []
    assert await repository.get_journal_entry_by_id(1) is None
    await broken.close()

async def test_writes_propagate_backend_errors(tmp_path):
    broken = BrokenBackend(tmp_path / "db.json")
    repository = WellnessRepository(broken, "u1")
    with pytest.raises(DatabaseConnectionError):
        await repository.insert_mood_entry(3, "2024-03-01")
    await broken.close()

async def test_entries_are_scoped_per_user(repository, backend):
    await repository.insert_mood_entry(4, "2024-03-01")
    other = WellnessRepository(backend, "someone-else")
    await other.insert_mood_entry(1, "2024-03-01")

    assert [e.mood_id for e in await repository.get_mood_entries()] == [4]
    assert [e.mood_id for e in await other.get_mood_entries()] == [1]

async def test_mood_entries_newest_first(repository):
    await repository.insert_mood_entry(3, "2024-03-01")
    await repository.insert_mood_entry(5, "2024-03-05")
    await repository.insert_mood_entry(2, "2024-03-03")
    assert [e.date for e in await repository.get_mood_entries()] == ["2024-03-05", "2024-03-03", "2024-03-01"]

async def test_delete_mood_entry_removes_links(repository, backend):
    entry_id = await repository.insert_mood_entry(4, "2024-03-01")
    await repository.insert_entry_activity(entry_id, 1)
    await repository.insert_entry_activity(entry_id, 2)
    assert await repository.get_entry_activities(entry_id) == [1, 2]

    await repository.delete_mood_entry(entry_id)
    assert await repository.get_mood_entries() == []
    assert await backend.select('entry_activities') == []

async def test_entry_links_are_private_to_owner(repository, backend):
    entry_id = await repository.insert_mood_entry(4, "2024-03-01")
    await repository.insert_entry_activity(entry_id, 1)
    await repository.insert_entry_activity(entry_id, 2)
    stranger = WellnessRepository(backend, "stranger")

    assert await stranger.get_entry_activities(entry_id) == []
    with pytest.raises(RecordNotFoundError):
        await stranger.delete_mood_entry(entry_id)

    assert await repository.get_entry_activities(entry_id) == [1, 2]
    assert len(await repository.get_mood_entries()) == 1

async def test_sleep_is_one_row_per_date(repository, backend):
    await repository.save_sleep_entry(SleepEntry(date="2024-03-01", quality=2))
    saved = await repository.save_sleep_entry(SleepEntry(date="2024-03-01", quality=5, duration=7.5))

    rows = await backend.select('sleep_entries')
    assert len(rows) == 1
    assert saved.quality == 5
    assert saved.duration == 7.5
    assert rows[0]['updated_at'] is not None

async def test_intimacy_upsert_and_delete(repository, backend):
    first = await repository.save_intimacy_entry(IntimacyEntry(date="2024-03-01", place="home"))
    second = await repository.save_intimacy_entry(IntimacyEntry(date="2024-03-01", type="couple", place="hotel"))
    assert first.id == second.id
    assert second.type == "couple"
    assert len(await backend.select('intimacy_entries')) == 1

    await repository.delete_intimacy_entry(second.id)
    assert await repository.get_intimacy_entries() == []

async def test_clarity_test_stores_mean_reaction_time(repository):
    test_id = await repository.insert_mental_clarity_test(
        score=650, reaction_times=[300, 400, 501], accuracy=92.5, duration=60, test_type='reaction'
    )
    tests = await repository.get_mental_clarity_tests()
    assert tests[0].id == test_id
    assert tests[0].average_reaction_time == 400

async def test_journal_and_analysis(repository):
    entry = await repository.insert_journal_entry(
        JournalEntry(template_id="stress", responses=["Deadline at work"], triggers=["Work"])
    )
    assert (await repository.get_journal_entry_by_id(entry.id)).triggers == ["Work"]

    await repository.insert_ai_analysis(AIAnalysis(journal_entry_id=entry.id, sentiment="negative", intensity=6))
    analysis = await repository.get_ai_analysis_for_entry(entry.id)
    assert analysis.sentiment == "negative"
    assert len(await repository.get_all_ai_analysis()) == 1

async def test_export_all_user_data(repository):
    await repository.insert_mood_entry(4, "2024-03-01", "fine")
    data = await repository.export_all_user_data()

    assert data['userId'] == repository.user_id
    assert set(data) == {
        'exportedAt', 'userId', 'moodEntries', 'activities', 'intimacyEntries',
        'sleepEntries', 'mentalClarityTests', 'journalEntries', 'aiAnalysis',
    }
    assert data['moodEntries'][0]['note'] == 'fine'

async def test_delete_all_user_data(repository, backend):
    entry_id = await repository.insert_mood_entry(4, "2024-03-01")
    await repository.insert_entry_activity(entry_id, 3)
    await repository.save_sleep_entry(SleepEntry(date="2024-03-01", quality=4))
    other = WellnessRepository(backend, "someone-else")
    await other.insert_mood_entry(2, "2024-03-01")

    deleted = await repository.delete_all_user_data()

    assert deleted['entry_activities'] == 1
    assert deleted['mood_entries'] == 1
    assert deleted['sleep_entries'] == 1
    assert await repository.get_mood_entries() == []
    assert len(await other.get_mood_entries()) == 1
    # Справочник активностей общий и не удаляется
    assert len(await repository.get_activities()) == len(DEFAULT_ACTIVITIES)
