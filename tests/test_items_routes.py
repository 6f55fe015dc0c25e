"""
Tests for item detail pages and TV season episodes
"""
from unittest.mock import MagicMock, patch

from services import item_service
from services.base_client import ProviderAPIException, build_item


def fetcher_returning(item):
    return MagicMock(return_value=item)


class TestItemPage:
    """Tests for GET /api/items/<mediaType>/<externalId>"""

    def test_catalog_item_with_reviews(self, client, user, other_user):
        client.post('/api/logs', headers=user['headers'], json={
            'mediaType': 'movies', 'externalId': '550', 'title': 'Fight Club', 'grade': 8, 'review': 'Great',
        })
        client.post('/api/logs', headers=other_user['headers'], json={
            'mediaType': 'movies', 'externalId': '550', 'title': 'Fight Club', 'grade': 7,
        })
        fetch = fetcher_returning(build_item('550', 'Fight Club', image='https://img/poster.jpg', year='1999'))
        with patch.dict(item_service.ITEM_FETCHERS, {'movies': ('tmdb', fetch)}):
            response = client.get('/api/items/movies/550')

        assert response.status_code == 200
        page = response.get_json()
        assert page['item']['title'] == 'Fight Club'
        assert page['meanGrade'] == 7.5
        assert len(page['reviews']) == 2
        assert {r['username'] for r in page['reviews']} == {'alice', 'bob'}
        assert all('email' not in r for r in page['reviews'])

    def test_user_key_is_passed_to_fetcher(self, client, user):
        client.put('/api/settings/api-keys', json={'tmdb': 'mykey'}, headers=user['headers'])
        fetch = fetcher_returning(build_item('550', 'Fight Club'))
        with patch.dict(item_service.ITEM_FETCHERS, {'movies': ('tmdb', fetch)}):
            client.get('/api/items/movies/550', headers=user['headers'])
        fetch.assert_called_once_with('550', 'mykey')

    def test_unknown_item(self, client):
        with patch.dict(item_service.ITEM_FETCHERS, {'movies': ('tmdb', fetcher_returning(None))}):
            response = client.get('/api/items/movies/999')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Item not found'

    def test_fallback_item_from_logs(self, client, user):
        client.post('/api/logs', headers=user['headers'], json={
            'mediaType': 'movies', 'externalId': '550', 'title': 'Fight Club', 'grade': 8, 'image': 'https://img/log.jpg',
        })
        with patch.dict(item_service.ITEM_FETCHERS, {'movies': ('tmdb', fetcher_returning(None))}):
            page = client.get('/api/items/movies/550').get_json()
        assert page['item']['id'] == '550'
        assert page['item']['title'] == 'Fight Club'
        assert page['item']['image'] == 'https://img/log.jpg'

    def test_provider_outage_reads_as_no_item(self, client):
        failing = MagicMock(side_effect=ProviderAPIException('down'))
        with patch.dict(item_service.ITEM_FETCHERS, {'movies': ('tmdb', failing)}):
            response = client.get('/api/items/movies/550')
        assert response.status_code == 404

    def test_missing_image_falls_back_to_log_image(self, client, user):
        client.post('/api/logs', headers=user['headers'], json={
            'mediaType': 'movies', 'externalId': '550', 'title': 'Fight Club', 'grade': 8, 'image': 'https://img/log.jpg',
        })
        fetch = fetcher_returning(build_item('550', 'Fight Club'))
        with patch.dict(item_service.ITEM_FETCHERS, {'movies': ('tmdb', fetch)}):
            page = client.get('/api/items/movies/550').get_json()
        assert page['item']['image'] == 'https://img/log.jpg'

    def test_board_game_uses_source_of_saved_log(self, client, user):
        client.post('/api/logs', headers=user['headers'], json={
            'mediaType': 'boardgames', 'externalId': '13', 'title': 'Catan', 'grade': 7, 'boardGameSource': 'ludopedia',
        })
        bgg = fetcher_returning(None)
        ludopedia = fetcher_returning(build_item('13', 'Catan'))
        with patch.dict(item_service.BOARD_GAME_FETCHERS, {'bgg': bgg, 'ludopedia': ludopedia}):
            client.get('/api/items/boardgames/13')
        ludopedia.assert_called_once()
        bgg.assert_not_called()

    def test_source_query_wins(self, client):
        bgg = fetcher_returning(build_item('13', 'Catan'))
        ludopedia = fetcher_returning(None)
        with patch.dict(item_service.BOARD_GAME_FETCHERS, {'bgg': bgg, 'ludopedia': ludopedia}):
            assert client.get('/api/items/boardgames/13?source=bgg').status_code == 200
        bgg.assert_called_once()

    def test_invalid_media_type(self, client):
        response = client.get('/api/items/podcasts/1')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Invalid mediaType or externalId'


class TestSeasonEpisodes:
    """Tests for GET /api/items/tv/<id>/season/<n>"""

    def test_episodes(self, client):
        with patch('services.tmdb.get_tv_season_episodes', return_value=[1, 2, 3]) as episodes:
            response = client.get('/api/items/tv/1399/season/2')
        assert response.get_json() == {'season': 2, 'episodes': [1, 2, 3]}
        episodes.assert_called_once_with('1399', 2, None)

    def test_provider_outage_returns_empty_list(self, client):
        with patch('services.tmdb.get_tv_season_episodes', side_effect=ProviderAPIException('down')):
            response = client.get('/api/items/tv/1399/season/1')
        assert response.status_code == 200
        assert response.get_json()['episodes'] == []
