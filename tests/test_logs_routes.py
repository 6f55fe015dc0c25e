"""
Tests for the signed-in user's logs
"""
import csv
import io

from repositories.log_repository import LogRepository
from models.log import Log
from db import db


def save(client, headers, body):
    return client.post('/api/logs', json=body, headers=headers)


class TestUpsertLog:
    """Tests for POST /api/logs"""

    def test_create(self, client, user, movie_log):
        response = save(client, user['headers'], movie_log)
        assert response.status_code == 201
        log = response.get_json()
        assert log['userId'] == user['user']['id']
        assert log['mediaType'] == 'movies'
        assert log['externalId'] == '550'
        assert log['grade'] == 9
        assert log['completedAt'].endswith('Z')
        assert log['startedAt'] is None
        assert log['boardGameSource'] is None

    def test_same_item_updates_instead_of_duplicating(self, app, client, user, movie_log):
        first = save(client, user['headers'], movie_log).get_json()
        movie_log['grade'] = 6
        second = save(client, user['headers'], movie_log)
        assert second.status_code == 201
        assert second.get_json()['id'] == first['id']
        assert second.get_json()['grade'] == 6
        with app.app_context():
            assert LogRepository.count_for_user(user['user']['id']) == 1

    def test_in_progress_status_stamps_started_at_once(self, client, user):
        body = {'mediaType': 'tv', 'externalId': '1399', 'title': 'Game of Thrones', 'grade': 8, 'status': 'watching'}
        first = save(client, user['headers'], body).get_json()
        assert first['startedAt'] is not None
        assert first['completedAt'] is None

        body['season'] = 2
        second = save(client, user['headers'], body).get_json()
        assert second['startedAt'] == first['startedAt']
        assert second['season'] == 2

        body['status'] = 'completed'
        third = save(client, user['headers'], body).get_json()
        assert third['startedAt'] == first['startedAt']
        assert third['completedAt'] is not None

    def test_status_must_fit_media_type(self, client, user, movie_log):
        movie_log['status'] = 'reading'
        response = save(client, user['headers'], movie_log)
        assert response.status_code == 400
        assert response.get_json()['error'] == {'status': ['Invalid status for this media type']}

    def test_missing_grade(self, client, user, movie_log):
        del movie_log['grade']
        response = save(client, user['headers'], movie_log)
        assert response.status_code == 400
        assert response.get_json()['error'] == {'grade': ['Grade is required']}

    def test_title_is_sanitized(self, client, user, movie_log):
        movie_log['title'] = '  <script>x</script>Fight Club '
        assert save(client, user['headers'], movie_log).get_json()['title'] == 'xFight Club'

    def test_board_game_source_defaults_to_user_provider(self, client, user):
        client.put('/api/settings/board-game-provider', json={'boardGameProvider': 'ludopedia'}, headers=user['headers'])
        body = {'mediaType': 'boardgames', 'externalId': '13', 'title': 'Catan', 'grade': 7}
        assert save(client, user['headers'], body).get_json()['boardGameSource'] == 'ludopedia'

        body = {'mediaType': 'boardgames', 'externalId': '14', 'title': 'Carcassonne', 'grade': 7, 'boardGameSource': 'bgg'}
        assert save(client, user['headers'], body).get_json()['boardGameSource'] == 'bgg'

    def test_requires_auth(self, client, movie_log):
        response = client.post('/api/logs', json=movie_log)
        assert response.status_code == 401
        assert response.get_json() == {'error': 'Unauthorized'}


class TestLogLimit:
    """Tests for the free tier log limit"""

    def test_free_user_hits_limit(self, client, user, movie_log, override_setting):
        override_setting('limits', 'free_log_limit', 1)
        assert save(client, user['headers'], movie_log).status_code == 201

        other = dict(movie_log, externalId='551', title='Other')
        response = save(client, user['headers'], other)
        assert response.status_code == 403
        body = response.get_json()
        assert body['error'] == 'Log limit reached'
        assert body['code'] == 'LOG_LIMIT_REACHED'
        assert body['limit'] == 1

    def test_updating_at_the_limit_is_allowed(self, client, user, movie_log, override_setting):
        override_setting('limits', 'free_log_limit', 1)
        save(client, user['headers'], movie_log)
        movie_log['grade'] = 5
        assert save(client, user['headers'], movie_log).status_code == 201

    def test_pro_has_no_limit(self, client, pro_user, movie_log, override_setting):
        override_setting('limits', 'free_log_limit', 1)
        save(client, pro_user['headers'], movie_log)
        other = dict(movie_log, externalId='551', title='Other')
        assert save(client, pro_user['headers'], other).status_code == 201


class TestListLogs:
    """Tests for GET /api/logs"""

    def _seed(self, client, headers):
        save(client, headers, {'mediaType': 'movies', 'externalId': '1', 'title': 'A', 'grade': 5, 'status': 'watched'})
        save(client, headers, {'mediaType': 'movies', 'externalId': '2', 'title': 'B', 'grade': 9, 'status': 'plan to watch'})
        save(client, headers, {'mediaType': 'books', 'externalId': 'OL1W', 'title': 'C', 'grade': 7, 'status': 'reading'})

    def test_lists_only_own_logs(self, client, user, other_user):
        self._seed(client, user['headers'])
        save(client, other_user['headers'], {'mediaType': 'movies', 'externalId': '9', 'title': 'Z', 'grade': 1})
        logs = client.get('/api/logs', headers=user['headers']).get_json()
        assert len(logs) == 3
        assert {log['userId'] for log in logs} == {user['user']['id']}

    def test_filter_by_media_type_and_status(self, client, user):
        self._seed(client, user['headers'])
        logs = client.get('/api/logs?mediaType=movies&status=watched', headers=user['headers']).get_json()
        assert [log['externalId'] for log in logs] == ['1']

    def test_status_invalid_for_type_is_ignored(self, client, user):
        self._seed(client, user['headers'])
        logs = client.get('/api/logs?mediaType=movies&status=reading', headers=user['headers']).get_json()
        assert len(logs) == 2

    def test_filter_by_external_id(self, client, user):
        self._seed(client, user['headers'])
        logs = client.get('/api/logs?mediaType=books&externalId=OL1W', headers=user['headers']).get_json()
        assert [log['title'] for log in logs] == ['C']

    def test_sort_by_grade(self, client, user):
        self._seed(client, user['headers'])
        logs = client.get('/api/logs?sort=grade', headers=user['headers']).get_json()
        assert [log['grade'] for log in logs] == [9, 7, 5]


class TestPatchAndDelete:
    """Tests for PATCH and DELETE /api/logs/<id>"""

    def test_patch_changes_only_given_fields(self, client, user, movie_log):
        log = save(client, user['headers'], movie_log).get_json()
        response = client.patch(f"/api/logs/{log['id']}", json={'grade': 4}, headers=user['headers'])
        assert response.status_code == 200
        patched = response.get_json()
        assert patched['grade'] == 4
        assert patched['review'] == 'First rule.'
        assert patched['image'] == movie_log['image']

    def test_patch_can_clear_review(self, client, user, movie_log):
        log = save(client, user['headers'], movie_log).get_json()
        patched = client.patch(f"/api/logs/{log['id']}", json={'review': None}, headers=user['headers']).get_json()
        assert patched['review'] is None

    def test_patch_to_in_progress_stamps_started_at_once(self, client, user):
        body = {'mediaType': 'tv', 'externalId': '1399', 'title': 'Game of Thrones', 'grade': 8}
        log = save(client, user['headers'], body).get_json()
        assert log['startedAt'] is None

        url = f"/api/logs/{log['id']}"
        first = client.patch(url, json={'status': 'watching'}, headers=user['headers']).get_json()
        assert first['startedAt'] is not None
        assert first['completedAt'] is None

        client.patch(url, json={'status': 'dropped'}, headers=user['headers'])
        again = client.patch(url, json={'status': 'watching'}, headers=user['headers']).get_json()
        assert again['startedAt'] == first['startedAt']

    def test_patch_to_completed_stamps_completed_at(self, client, user):
        body = {'mediaType': 'tv', 'externalId': '1399', 'title': 'Game of Thrones', 'grade': 8, 'status': 'watching'}
        log = save(client, user['headers'], body).get_json()
        assert log['completedAt'] is None

        patched = client.patch(f"/api/logs/{log['id']}", json={'status': 'completed'}, headers=user['headers']).get_json()
        assert patched['status'] == 'completed'
        assert patched['completedAt'] is not None
        assert patched['startedAt'] == log['startedAt']

    def test_patch_null_clears_hours_and_counters(self, client, user):
        body = {
            'mediaType': 'tv', 'externalId': '1399', 'title': 'Game of Thrones', 'grade': 8,
            'season': 3, 'episode': 9, 'contentHours': 40,
        }
        log = save(client, user['headers'], body).get_json()
        assert (log['season'], log['episode'], log['contentHours']) == (3, 9, 40)

        patched = client.patch(
            f"/api/logs/{log['id']}",
            json={'season': None, 'episode': None, 'contentHours': None},
            headers=user['headers'],
        ).get_json()
        assert patched['season'] is None
        assert patched['episode'] is None
        assert patched['contentHours'] is None
        assert patched['grade'] == 8

    def test_patch_rejects_bad_status(self, client, user, movie_log):
        log = save(client, user['headers'], movie_log).get_json()
        response = client.patch(f"/api/logs/{log['id']}", json={'status': 'playing'}, headers=user['headers'])
        assert response.status_code == 400

    def test_cannot_patch_someone_elses_log(self, client, user, other_user, movie_log):
        log = save(client, user['headers'], movie_log).get_json()
        response = client.patch(f"/api/logs/{log['id']}", json={'grade': 1}, headers=other_user['headers'])
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Log not found'

    def test_delete(self, app, client, user, movie_log):
        log = save(client, user['headers'], movie_log).get_json()
        response = client.delete(f"/api/logs/{log['id']}", headers=user['headers'])
        assert response.status_code == 204
        with app.app_context():
            assert db.session.get(Log, log['id']) is None
        assert client.delete(f"/api/logs/{log['id']}", headers=user['headers']).status_code == 404


class TestStatsAndExport:
    """Tests for /api/logs/stats and /api/logs/export"""

    def test_stats_by_category(self, client, user):
        save(client, user['headers'], {
            'mediaType': 'movies', 'externalId': '1', 'title': 'A', 'grade': 5, 'status': 'watched', 'contentHours': 2,
        })
        save(client, user['headers'], {
            'mediaType': 'movies', 'externalId': '2', 'title': 'B', 'grade': 5, 'status': 'plan to watch', 'contentHours': 3,
        })
        stats = client.get('/api/logs/stats?group=category', headers=user['headers']).get_json()
        assert stats == {'group': 'category', 'data': [{'period': 'movies', 'hours': 2}]}

    def test_export_is_pro_only(self, client, user):
        response = client.get('/api/logs/export', headers=user['headers'])
        assert response.status_code == 403
        assert response.get_json() == {'error': 'Export is available on Pro only', 'code': 'PRO_REQUIRED'}

    def test_export_csv(self, client, pro_user, movie_log):
        save(client, pro_user['headers'], movie_log)
        save(client, pro_user['headers'], {'mediaType': 'books', 'externalId': 'OL1W', 'title': 'Dune', 'grade': 8})

        response = client.get('/api/logs/export?mediaType=movies', headers=pro_user['headers'])
        assert response.status_code == 200
        assert response.headers['Content-Type'].startswith('text/csv')
        assert response.headers['Content-Disposition'] == 'attachment; filename="logs-movies.csv"'

        rows = list(csv.reader(io.StringIO(response.get_data(as_text=True))))
        assert rows[0][:4] == ['mediaType', 'externalId', 'title', 'grade']
        assert len(rows) == 2
        assert rows[1][:5] == ['movies', '550', 'Fight Club', '9', 'watched']

    def test_export_everything_filename(self, client, pro_user):
        response = client.get('/api/logs/export', headers=pro_user['headers'])
        assert response.headers['Content-Disposition'] == 'attachment; filename="logs-export.csv"'
