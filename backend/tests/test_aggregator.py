import pytest
import requests

from moodmatch.core.emotion.schema import STANDARD_EMOTIONS
from moodmatch.core.recommend import (
    GoogleBooksSource,
    OmdbMovieSource,
    RecommendationAggregator,
    RecommendationItem,
    SourceNotConfigured,
    build_aggregator,
    get_fallback,
)
from moodmatch.core.recommend.sources import ContentSource


class StubSource(ContentSource):
    """Fuente con resultado fijo, excepción o lista vacía."""

    def __init__(self, kind, outcome, configured=True):
        super().__init__(session=None)
        self.kind = kind
        self.outcome = outcome
        self.configured = configured
        self.calls = []

    def is_configured(self):
        return self.configured

    def fetch(self, emotion, limit):
        self.calls.append((emotion, limit))
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return list(self.outcome)


def live_items(kind, count=5):
    return [
        RecommendationItem(id=f'{kind}-{i}', title=f'Live {kind} {i}', description='',
                           image='', link=f'https://example.com/{kind}/{i}', kind=kind)
        for i in range(count)
    ]


@pytest.mark.parametrize("emotion", STANDARD_EMOTIONS)
def test_all_sources_failing_returns_fallbacks(emotion, fake_session):
    # Sesión sin rutas: toda petición falla con ConnectionError
    aggregator = build_aggregator({
        'OMDB_API_KEY': 'omdb-key',
        'SPOTIFY_CLIENT_ID': 'id',
        'SPOTIFY_CLIENT_SECRET': 'secret',
    }, session=fake_session)

    result = aggregator.get(emotion)

    for kind in ('movies', 'songs', 'books'):
        assert [item.title for item in result.get(kind)] == [
            item.title for item in get_fallback(kind, emotion)
        ]


def test_happy_without_credentials(fake_session):
    result = build_aggregator({}, session=fake_session).get('happy')

    assert result.movies[0].title == 'The Grand Budapest Hotel'
    assert result.songs[0].title == 'Happy - Pharrell Williams'
    assert result.books[0].title == 'The Seven Husbands of Evelyn Hugo'
    # Sin credenciales no se llama a OMDB ni a Spotify
    assert fake_session.calls_to('omdbapi.com') == []
    assert fake_session.calls_to('spotify.com') == []


def test_unknown_emotion_raises():
    with pytest.raises(ValueError):
        RecommendationAggregator(None, None, None).get('bored')


def test_kinds_are_independent():
    movies = StubSource('movies', live_items('movies'))
    songs = StubSource('songs', requests.Timeout('spotify slow'))
    books = StubSource('books', [])

    result = RecommendationAggregator(movies, songs, books).get('sad')

    assert [item.title for item in result.movies] == ['Live movies 0', 'Live movies 1', 'Live movies 2']
    assert result.songs[0].title == get_fallback('songs', 'sad')[0].title
    assert result.books[0].title == get_fallback('books', 'sad')[0].title
    assert movies.calls == [('sad', 3)]


def test_unexpected_source_error_is_contained():
    broken = StubSource('books', RuntimeError('boom'))
    result = RecommendationAggregator(None, None, broken).get('fear')
    assert len(result.books) == 3


def test_not_configured_falls_back():
    source = StubSource('movies', SourceNotConfigured('OMDB_API_KEY no configurada'))
    result = RecommendationAggregator(source, None, None).get('neutral')
    assert result.movies[0].title == 'The Shawshank Redemption'


def test_limit_applies_to_live_and_fallback():
    aggregator = RecommendationAggregator(StubSource('movies', live_items('movies')), None, None, limit=2)
    result = aggregator.get('happy')

    assert len(result.movies) == 2
    assert len(result.songs) == 2


def test_fallback_lists_are_not_shared_between_calls():
    aggregator = RecommendationAggregator(None, None, None)

    first = aggregator.get('angry')
    first.movies[0].title = 'Modified'
    first.songs.clear()

    second = aggregator.get('angry')
    assert second.movies[0].title == 'The Karate Kid'
    assert len(second.songs) == 3


def test_fallback_set_defaults_to_neutral():
    result = RecommendationAggregator(None, None, None).fallback_set()
    assert result.movies[0].title == 'The Shawshank Redemption'


def test_status(fake_session):
    aggregator = RecommendationAggregator(
        OmdbMovieSource('omdb-key', session=fake_session),
        StubSource('songs', [], configured=False),
        GoogleBooksSource('books-key', session=fake_session),
    )
    assert aggregator.status() == {
        'spotify_available': False,
        'omdb_configured': True,
        'books_api_key': True,
    }
    assert RecommendationAggregator(None, None, None).status() == {
        'spotify_available': False,
        'omdb_configured': False,
        'books_api_key': False,
    }
