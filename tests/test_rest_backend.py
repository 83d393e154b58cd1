import json

import pytest
from aiohttp import web
from aiohttp import test_utils

from core.database import (
    RestBackend, DatabaseError, DatabaseConnectionError, RecordNotFoundError, NotAuthenticatedError
)

def _matches(row, column, condition):
    value = row.get(column)
    if condition == 'is.null':
        return value is None
    if condition.startswith('eq.'):
        return RestBackend._encode(value) == condition[3:]
    if condition.startswith('in.(') and condition.endswith(')'):
        return RestBackend._encode(value) in condition[4:-1].split(',')
    raise AssertionError(f"unexpected filter {condition}")

class FakePostgrest:
    """Минимальный PostgREST: eq/in/is.null фильтры, order, limit"""

    RESERVED = ('select', 'order', 'limit')

    def __init__(self):
        self.tables = {}
        self.requests = []
        self.fail_with = None
        self.app = web.Application()
        self.app.router.add_route('*', '/rest/v1/{table}', self.handle)

    def _filtered(self, table, query):
        rows = self.tables.setdefault(table, [])
        for column, condition in query.items():
            if column in self.RESERVED:
                continue
            rows = [r for r in rows if _matches(r, column, condition)]
        return rows

    async def handle(self, request):
        table = request.match_info['table']
        body = await request.text()
        self.requests.append({
            'method': request.method,
            'table': table,
            'query': dict(request.query),
            'headers': request.headers.copy(),
            'body': json.loads(body) if body else None,
        })

        if self.fail_with is not None:
            status, payload = self.fail_with
            return web.json_response(payload, status=status)

        if request.method == 'GET':
            rows = self._filtered(table, request.query)
            if 'order' in request.query:
                for part in reversed(request.query['order'].split(',')):
                    column, direction = part.rsplit('.', 1)
                    rows = sorted(rows, key=lambda r: r[column], reverse=direction == 'desc')
            if 'limit' in request.query:
                rows = rows[:int(request.query['limit'])]
            return web.json_response(rows)

        if request.method == 'POST':
            stored = self.tables.setdefault(table, [])
            created = []
            for row in json.loads(body):
                row = {**row, 'id': len(stored) + 1}
                stored.append(row)
                created.append(row)
            return web.json_response(created, status=201)

        if request.method == 'PATCH':
            rows = self._filtered(table, request.query)
            for row in rows:
                row.update(json.loads(body))
            return web.json_response(rows)

        if request.method == 'DELETE':
            rows = self._filtered(table, request.query)
            self.tables[table] = [r for r in self.tables[table] if r not in rows]
            return web.json_response(rows)

        return web.Response(status=405)

@pytest.fixture
def fake():
    return FakePostgrest()

@pytest.fixture
async def rest(fake):
    server = test_utils.TestServer(fake.app)
    await server.start_server()
    backend = RestBackend(str(server.make_url("")), "anon-key", max_retries=3, retry_delay=0)
    yield backend
    await backend.close()
    await server.close()

async def test_insert_and_select_with_filters(rest, fake):
    await rest.insert('mood_entries', [
        {'user_id': 'u1', 'mood_id': 4, 'date': '2024-03-01'},
        {'user_id': 'u2', 'mood_id': 2, 'date': '2024-03-01'},
    ])

    rows = await rest.select('mood_entries', {'user_id': 'u1'})
    assert [r['mood_id'] for r in rows] == [4]

    request = fake.requests[-1]
    assert request['query']['user_id'] == 'eq.u1'
    assert request['query']['select'] == '*'
    assert request['headers']['apikey'] == 'anon-key'
    assert request['headers']['Authorization'] == 'Bearer anon-key'

async def test_insert_asks_for_representation(rest, fake):
    rows = await rest.insert('activities', [{'name': 'Work'}])
    assert rows[0]['id'] == 1
    assert fake.requests[-1]['headers']['Prefer'] == 'return=representation'

async def test_in_filter_order_and_limit(rest, fake):
    await rest.insert('entry_activities', [
        {'entry_id': 1, 'activity_id': 5},
        {'entry_id': 2, 'activity_id': 6},
        {'entry_id': 3, 'activity_id': 7},
    ])

    rows = await rest.select('entry_activities', {'entry_id': [1, 3]},
                             order=[('activity_id', True)], limit=1)
    assert [r['activity_id'] for r in rows] == [7]

    query = fake.requests[-1]['query']
    assert query['entry_id'] == 'in.(1,3)'
    assert query['order'] == 'activity_id.desc'
    assert query['limit'] == '1'

def test_query_params_encoding():
    params = RestBackend._query_params({'is_good': True, 'note': None, 'id': (1, 2)})
    assert params == {'is_good': 'eq.true', 'note': 'is.null', 'id': 'in.(1,2)'}

async def test_update_and_delete(rest, fake):
    await rest.insert('sleep_entries', [{'user_id': 'u1', 'date': '2024-03-01', 'quality': 2}])

    updated = await rest.update('sleep_entries', {'quality': 5}, {'user_id': 'u1', 'id': 1})
    assert updated[0]['quality'] == 5
    assert fake.requests[-1]['method'] == 'PATCH'

    removed = await rest.delete('sleep_entries', {'id': 1})
    assert len(removed) == 1
    assert fake.tables['sleep_entries'] == []

async def test_refuses_unfiltered_writes(rest, fake):
    with pytest.raises(DatabaseError):
        await rest.update('sleep_entries', {'quality': 1}, {})
    with pytest.raises(DatabaseError):
        await rest.delete('sleep_entries', {})
    assert fake.requests == []

async def test_transient_errors_are_retried(rest, fake):
    fake.fail_with = (503, {'message': 'upstream down'})
    with pytest.raises(DatabaseConnectionError):
        await rest.select('activities')
    assert len(fake.requests) == 3

async def test_not_found_code(rest, fake):
    fake.fail_with = (406, {'code': 'PGRST116', 'message': 'no rows'})
    with pytest.raises(RecordNotFoundError) as exc_info:
        await rest.select('activities')
    assert exc_info.value.code == 'PGRST116'
    assert len(fake.requests) == 1

async def test_unauthorized(rest, fake):
    fake.fail_with = (401, {'message': 'JWT expired'})
    with pytest.raises(NotAuthenticatedError):
        await rest.select('mood_entries', {'user_id': 'u1'})

async def test_other_errors_are_not_retried(rest, fake):
    fake.fail_with = (400, {'code': '42703', 'message': 'column does not exist'})
    with pytest.raises(DatabaseError) as exc_info:
        await rest.select('mood_entries')
    assert not isinstance(exc_info.value, DatabaseConnectionError)
    assert len(fake.requests) == 1

async def test_health_check(rest, fake):
    assert (await rest.health_check())['status'] == 'healthy'

    fake.fail_with = (500, {'message': 'boom'})
    health = await rest.health_check()
    assert health['status'] == 'unhealthy'
    assert 'boom' in health['error']

async def test_unreachable_server_is_connection_error():
    backend = RestBackend("http://127.0.0.1:9", "anon-key", max_retries=2, retry_delay=0, timeout=2)
    try:
        with pytest.raises(DatabaseConnectionError):
            await backend.select('activities')
    finally:
        await backend.close()
