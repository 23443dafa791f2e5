import pytest

from moodmatch.core.emotion.schema import STANDARD_EMOTIONS
from moodmatch.core.recommend import CONTENT_KINDS, RecommendationItem, RecommendationSet, get_fallback, get_queries
from moodmatch.core.recommend.catalog import emotion_queries


@pytest.mark.parametrize("emotion", STANDARD_EMOTIONS)
@pytest.mark.parametrize("kind", CONTENT_KINDS)
def test_every_emotion_has_three_fallback_items(emotion, kind):
    items = get_fallback(kind, emotion)

    assert len(items) == 3
    for item in items:
        assert item.title and item.link
        assert item.description
        assert item.image


def test_happy_fallback_examples():
    assert get_fallback('movies', 'happy')[0].title == 'The Grand Budapest Hotel'
    assert get_fallback('songs', 'happy')[0].title == 'Happy - Pharrell Williams'
    assert get_fallback('books', 'happy')[0].title == 'The Seven Husbands of Evelyn Hugo'


def test_fallback_returns_independent_copies():
    first = get_fallback('movies', 'sad')
    first[0].title = 'Changed'
    first.clear()

    assert get_fallback('movies', 'sad')[0].title == 'Inside Out'


def test_fallback_without_image_gets_placeholder():
    wall_e = get_fallback('movies', 'disgust')[0]
    assert wall_e.image == '/placeholder.svg?height=200&width=150&text=Movie'


def test_queries_are_read_only():
    songs = get_queries('happy', 'songs')

    assert 'pop' in songs['genres']
    assert songs['audio_features']['valence'] == 0.8
    with pytest.raises(TypeError):
        songs['genres'] = ('metal',)
    with pytest.raises(TypeError):
        emotion_queries()['happy'] = {}


def test_queries_reject_unknown_emotion():
    with pytest.raises(ValueError):
        get_queries('bored', 'movies')
    with pytest.raises(KeyError):
        get_queries('happy', 'podcasts')


def test_item_requires_title_and_link():
    with pytest.raises(ValueError):
        RecommendationItem(id='1', title='', description='', image='', link='https://x')
    with pytest.raises(ValueError):
        RecommendationItem(id='1', title='Title', description='', image='', link='')


def test_item_placeholders_and_to_dict():
    item = RecommendationItem(id='', title='Some Song', description='', image='',
                              link='https://open.spotify.com/track/1', kind='songs')
    payload = item.to_dict()

    assert payload == {
        'id': 'Some Song',
        'title': 'Some Song',
        'description': 'No description available',
        'image': '/placeholder.svg?height=200&width=200&text=Song',
        'link': 'https://open.spotify.com/track/1',
    }


def test_recommendation_set_to_dict():
    movie = get_fallback('movies', 'fear')[0]
    result = RecommendationSet(movies=[movie]).to_dict()

    assert result['movies'][0]['title'] == 'Finding Nemo'
    assert result['songs'] == [] and result['books'] == []
