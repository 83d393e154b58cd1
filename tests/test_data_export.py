import json

import pandas as pd
import pytest

from core.database import LocalBackend
from services.data_export import export_to_csv, export_to_json, export_user_archive
from services.scheduler import BACKUP_JOB_ID, create_scheduler, run_backup

def test_export_to_json(tmp_path):
    path = export_to_json("u1", {"userId": "u1", "note": "привет"}, tmp_path / "out")
    assert path.name == "user_u1_export.json"
    assert json.loads(path.read_text(encoding="utf-8"))["note"] == "привет"

def test_export_to_csv_encodes_lists(tmp_path):
    rows = [{"id": 1, "reactionTimes": [300, 320], "score": 640}]
    path = export_to_csv("u1", rows, tmp_path, name="mentalClarityTests")
    assert path.name == "user_u1_mentalClarityTests.csv"

    frame = pd.read_csv(path)
    assert json.loads(frame.loc[0, "reactionTimes"]) == [300, 320]
    assert frame.loc[0, "score"] == 640

def test_export_names_keep_user_ids_apart(tmp_path):
    first = export_to_json("alice@x.com", {"userId": "alice@x.com"}, tmp_path)
    second = export_to_json("alice_x_com", {"userId": "alice_x_com"}, tmp_path)
    assert first != second
    assert json.loads(first.read_text(encoding="utf-8"))["userId"] == "alice@x.com"

def test_export_to_csv_skips_empty(tmp_path):
    assert export_to_csv("u1", [], tmp_path) is None

async def test_export_user_archive(repository, tmp_path):
    await repository.insert_mood_entry(4, "2024-03-01", "calm")
    await repository.insert_mental_clarity_test(score=500, reaction_times=[250], accuracy=90, duration=30)

    files = await export_user_archive(repository, tmp_path, "all")
    names = sorted(p.name for p in files)
    assert names == [
        "user_user-1_export.json",
        "user_user-1_mentalClarityTests.csv",
        "user_user-1_moodEntries.csv",
    ]

    json_only = await export_user_archive(repository, tmp_path / "json", "json")
    payload = json.loads(json_only[0].read_text(encoding="utf-8"))
    assert payload["moodEntries"][0]["note"] == "calm"

async def test_export_rejects_unknown_format(repository, tmp_path):
    with pytest.raises(ValueError):
        await export_user_archive(repository, tmp_path, "xml")

async def test_scheduler_only_for_local_backups(backend):
    assert create_scheduler(backend, interval_hours=6, auto_backup=False) is None

    scheduler = create_scheduler(backend, interval_hours=6)
    job = scheduler.get_job(BACKUP_JOB_ID)
    assert job is not None
    assert job.args == (backend,)

async def test_run_backup(backend):
    await backend.insert('activities', [{'name': 'Work'}])
    await run_backup(backend)
    assert len(backend.get_backups()) == 1
