import pytest

from core.models import IntimacyEntry, ValidationError
from services.mood_service import MoodService
from utils.datetime_utils import today_str

@pytest.fixture
def service(repository):
    return MoodService(repository)

async def test_add_entry_with_activities_and_sleep(service, repository):
    entry = await service.add_mood_entry(4, [1, 2, 2], note="Good day", date="2024-03-01",
                                         sleep_quality=4, bedtime="23:30", wake_time="07:00")

    assert entry.id is not None
    assert entry.user_id == repository.user_id
    assert await repository.get_entry_activities(entry.id) == [1, 2]

    sleep = await repository.get_sleep_entry_for_date("2024-03-01")
    assert sleep.quality == 4
    assert sleep.hours_slept == 7.5

async def test_same_date_replaces_entry(service, repository, backend):
    first = await service.add_mood_entry(2, [1], date="2024-03-01")
    second = await service.add_mood_entry(5, [3], date="2024-03-01")

    entries = await repository.get_mood_entries()
    assert [e.mood_id for e in entries] == [5]
    assert entries[0].id == second.id != first.id
    links = await backend.select('entry_activities')
    assert [(l['entry_id'], l['activity_id']) for l in links] == [(second.id, 3)]

async def test_invalid_entry_changes_nothing(service, repository):
    await service.add_mood_entry(3, [], date="2024-03-01")
    with pytest.raises(ValidationError):
        await service.add_mood_entry(4, [], note="x" * 501, date="2024-03-01")
    assert [e.mood_id for e in await repository.get_mood_entries()] == [3]

async def test_without_sleep_fields_no_sleep_row(service, repository):
    await service.add_mood_entry(3, [], date="2024-03-01")
    assert await repository.get_sleep_entries() == []

async def test_entry_for_date(service, repository):
    day = today_str()
    activities = await repository.get_activities()
    await service.add_mood_entry(5, [activities[0].id], note="Great", date=day, sleep_quality=5)
    await repository.insert_mental_clarity_test(score=720, reaction_times=[], accuracy=90, duration=60)

    result = await service.get_entry_for_date(day)
    assert result.mood.name == "rad"
    assert [a.id for a in result.activities] == [activities[0].id]
    assert result.note == "Great"
    assert result.sleep_quality == 5
    assert result.mental_clarity == 720

async def test_entry_for_missing_date(service):
    assert await service.get_entry_for_date("2024-03-01") is None

async def test_calendar_day(service):
    await service.add_mood_entry(3, [], date="2024-03-01", sleep_quality=2)
    await service.add_intimacy_entry(IntimacyEntry(date="2024-03-01", mood_before=2, mood_after=4))
    await service.add_intimacy_entry(IntimacyEntry(date="2024-03-02"))

    calendar = await service.get_calendar_day("2024-03-01")
    assert calendar['day']['mood']['id'] == 3
    assert calendar['sleep']['quality'] == 2
    assert calendar['mentalClarity'] is None
    assert len(calendar['intimacyActivities']) == 1

async def test_mood_stats(service):
    assert (await service.get_mood_stats())['totalEntries'] == 0

    await service.add_mood_entry(5, [], date="2024-03-01")
    await service.add_mood_entry(2, [], date="2024-03-02")
    await service.add_mood_entry(5, [], date="2024-03-03")

    stats = await service.get_mood_stats()
    assert stats == {'totalEntries': 3, 'averageMood': 4.0, 'moodCounts': {2: 1, 5: 2}}

async def test_delete_all_data(service, repository):
    await service.add_mood_entry(3, [1], date="2024-03-01")
    deleted = await service.delete_all_data()
    assert deleted['mood_entries'] == 1
    assert await repository.get_mood_entries() == []
