"""
Tests for catalog search and keyless search metering
"""
from unittest.mock import MagicMock, patch

from services import search_service

RESULTS = [{'id': '550', 'title': 'Fight Club', 'image': None, 'year': '1999', 'subtitle': None}]


def movie_searcher():
    return MagicMock(return_value=list(RESULTS))


class TestSearchValidation:
    """Tests for query validation"""

    def test_missing_query(self, client):
        response = client.get('/api/search?type=movies')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid type or q'

    def test_unknown_type(self, client):
        assert client.get('/api/search?type=podcasts&q=x').status_code == 400

    def test_query_empty_after_sanitizing(self, client):
        response = client.get('/api/search?type=books&q=%3Cb%3E%3C%2Fb%3E')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid or empty search query'


class TestKeylessCatalogs:
    """Books, anime and manga need no key and are never metered"""

    def test_books(self, client, override_setting):
        override_setting('limits', 'free_search_limit', 1)
        searcher = MagicMock(return_value=list(RESULTS))
        with patch.dict(search_service.KEYLESS_SEARCHERS, {'books': searcher}):
            for _ in range(3):
                body = client.get('/api/search?type=books&q=dune&sort=title_asc').get_json()
                assert body == {'results': RESULTS}
        searcher.assert_called_with('dune', sort='title_asc')

    def test_sort_not_allowed_for_type_is_dropped(self, client):
        searcher = MagicMock(return_value=[])
        with patch.dict(search_service.KEYLESS_SEARCHERS, {'anime': searcher}):
            client.get('/api/search?type=anime&q=x&sort=year_desc')
        searcher.assert_called_once_with('x', sort=None)


class TestFreeSearches:
    """Tests for keyless searches against keyed catalogs"""

    def test_anonymous_limit(self, client, override_setting):
        override_setting('limits', 'free_search_limit', 2)
        searcher = movie_searcher()
        with patch.dict(search_service.KEYED_SEARCHERS, {'movies': ('tmdb', searcher)}):
            first = client.get('/api/search?type=movies&q=fight').get_json()
            second = client.get('/api/search?type=movies&q=fight').get_json()
            third = client.get('/api/search?type=movies&q=fight').get_json()

        assert first['results'] == RESULTS
        assert first['freeSearchUsed'] == 1
        assert first['freeSearchLimit'] == 2
        assert 'requiresApiKey' not in first

        assert second['freeSearchUsed'] == 2
        assert second['freeSearchLimitReached'] is True
        assert second['requiresApiKey'] == 'tmdb'

        assert third['results'] == []
        assert third['freeSearchLimitReached'] is True
        assert third['apiKeyName'] == 'TMDB (Movies & TV)'
        assert searcher.call_count == 2

    def test_counters_are_per_category(self, client, override_setting):
        override_setting('limits', 'free_search_limit', 1)
        with patch.dict(search_service.KEYED_SEARCHERS, {
            'movies': ('tmdb', movie_searcher()),
            'tv': ('tmdb', movie_searcher()),
        }):
            client.get('/api/search?type=movies&q=a')
            body = client.get('/api/search?type=tv&q=a').get_json()
        assert body['results'] == RESULTS

    def test_forwarded_for_header_does_not_reset_quota(self, client, override_setting):
        override_setting('limits', 'free_search_limit', 5)
        searcher = movie_searcher()
        with patch.dict(search_service.KEYED_SEARCHERS, {'movies': ('tmdb', searcher)}):
            bodies = [
                client.get('/api/search?type=movies&q=x', headers={'X-Forwarded-For': f'10.0.0.{n}'}).get_json()
                for n in range(8)
            ]
        assert [len(b['results']) for b in bodies] == [1, 1, 1, 1, 1, 0, 0, 0]
        assert all(b['freeSearchLimitReached'] for b in bodies[5:])
        assert searcher.call_count == 5

    def test_signed_in_without_key_sees_prompt(self, client, user):
        with patch.dict(search_service.KEYED_SEARCHERS, {'games': ('rawg', movie_searcher())}):
            body = client.get('/api/search?type=games&q=zelda', headers=user['headers']).get_json()
        assert body['results'] == RESULTS
        assert body['requiresApiKey'] == 'rawg'
        assert body['freeSearchUsed'] == 1

    def test_user_key_skips_metering(self, client, user):
        client.put('/api/settings/api-keys', json={'tmdb': 'mykey'}, headers=user['headers'])
        searcher = movie_searcher()
        with patch.dict(search_service.KEYED_SEARCHERS, {'movies': ('tmdb', searcher)}):
            body = client.get('/api/search?type=movies&q=fight&sort=year_desc', headers=user['headers']).get_json()
        assert body == {'results': RESULTS}
        searcher.assert_called_once_with('fight', 'mykey', sort='year_desc')

    def test_board_games_follow_user_provider(self, client, user):
        client.put('/api/settings/board-game-provider', json={'boardGameProvider': 'ludopedia'}, headers=user['headers'])
        bgg, ludopedia = movie_searcher(), movie_searcher()
        with patch.dict(search_service.BOARD_GAME_SEARCHERS, {'bgg': bgg, 'ludopedia': ludopedia}):
            body = client.get('/api/search?type=boardgames&q=catan', headers=user['headers']).get_json()
        assert body['requiresApiKey'] == 'ludopedia'
        ludopedia.assert_called_once()
        bgg.assert_not_called()

    def test_provider_failure_is_502(self, client):
        failing = MagicMock(side_effect=RuntimeError('boom'))
        with patch.dict(search_service.KEYED_SEARCHERS, {'movies': ('tmdb', failing)}):
            response = client.get('/api/search?type=movies&q=fight')
        assert response.status_code == 502
        assert response.get_json()['error'] == 'Search failed'


class TestFreeSearchTracker:
    """Tests for the in-process counter"""

    def test_try_consume(self):
        tracker = search_service.FreeSearchTracker()
        assert tracker.try_consume('k', 2) == (True, 1)
        assert tracker.try_consume('k', 2) == (True, 2)
        assert tracker.try_consume('k', 2) == (False, 2)
        assert tracker.usage('k') == 2

    def test_board_game_key_includes_provider(self):
        assert search_service.free_search_key('1.2.3.4', 'boardgames', 'bgg') == '1.2.3.4-boardgames-bgg'
        assert search_service.free_search_key('1.2.3.4', 'movies', 'tmdb') == '1.2.3.4-movies'
