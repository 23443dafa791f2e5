import pytest
import requests

from moodmatch.core.emotion.providers import (
    AzureFaceProvider,
    FacePlusPlusProvider,
    GoogleVisionProvider,
    LocalServiceProvider,
    ProviderError,
    ProviderNotConfigured,
    build_providers,
)
from moodmatch.core.emotion.providers.faceplusplus import describe_error, validate_image
from moodmatch.core.emotion.providers.google_vision import likelihood_scores
from moodmatch.core.emotion.schema import STANDARD_EMOTIONS

from conftest import FakeResponse


def assert_valid_distribution(result):
    assert set(result.distribution) == set(STANDARD_EMOTIONS)
    assert sum(result.distribution.values()) == pytest.approx(1.0, abs=1e-6)
    assert max(result.distribution, key=result.distribution.get) == result.emotion


# --- Servicio local ---------------------------------------------------------

def test_local_service_success(fake_session, sample_image):
    fake_session.add('GET', 'localhost:5001/health', FakeResponse(200, {'status': 'ok'}))
    fake_session.add('POST', 'localhost:5001/detect-emotion', FakeResponse(200, {
        'success': True,
        'emotion': 'sad',
        'confidence': 0.7,
        'all_emotions': {'sad': 0.7, 'neutral': 0.2, 'fear': 0.1},
        'face_detected': True,
    }))
    provider = LocalServiceProvider('http://localhost:5001/', session=fake_session)

    result = provider.classify(sample_image)

    assert result.emotion == 'sad'
    assert result.provenance == 'local_service'
    assert result.confidence == pytest.approx(0.7)
    assert_valid_distribution(result)
    assert fake_session.calls_to('/detect-emotion')[0]['json'] == {'image': sample_image}


def test_local_service_down_raises_provider_error(fake_session, sample_image):
    provider = LocalServiceProvider('http://localhost:5001', session=fake_session)

    with pytest.raises(ProviderError):
        provider.classify(sample_image)
    assert fake_session.calls_to('/detect-emotion') == []


def test_local_service_no_face(fake_session, sample_image):
    fake_session.add('GET', '/health', FakeResponse(200, {'status': 'ok'}))
    fake_session.add('POST', '/detect-emotion', FakeResponse(200, {
        'success': True, 'emotion': 'neutral', 'confidence': 0.4, 'face_detected': False,
    }))
    result = LocalServiceProvider('http://svc', session=fake_session).classify(sample_image)

    assert result.face_detected is False
    assert result.emotion == 'neutral'


def test_local_service_unconfigured_without_url(sample_image):
    with pytest.raises(ProviderNotConfigured):
        LocalServiceProvider('').classify(sample_image)


# --- Face++ -------------------------------------------------------------------

def test_faceplusplus_maps_taxonomy_and_divides_by_100(fake_session, sample_image):
    fake_session.add('POST', 'faceplusplus', FakeResponse(200, {'faces': [{
        'attributes': {
            'emotion': {
                'happiness': 85.0, 'sadness': 2.0, 'anger': 1.0, 'surprise': 6.0,
                'neutral': 4.0, 'disgust': 1.0, 'fear': 1.0,
            },
            'facequality': {'value': 80.0, 'threshold': 70.1},
        },
    }]}))
    provider = FacePlusPlusProvider('real-key', 'real-secret', session=fake_session)

    result = provider.classify(sample_image)

    assert result.emotion == 'happy'
    assert result.provenance == 'faceplusplus'
    assert result.confidence == pytest.approx(0.85)
    assert result.distribution['surprised'] == pytest.approx(0.06)
    assert result.details['face_quality'] == pytest.approx(0.701)
    assert_valid_distribution(result)

    fields = fake_session.calls[0]['files']
    assert fields['api_key'] == (None, 'real-key')
    assert fields['image_base64'][1] == sample_image.split(',', 1)[1]


def test_faceplusplus_no_faces_gives_low_confidence_neutral(fake_session, sample_image):
    fake_session.add('POST', 'faceplusplus', FakeResponse(200, {'faces': []}))
    result = FacePlusPlusProvider('k', 's', session=fake_session).classify(sample_image)

    assert result.emotion == 'neutral'
    assert result.confidence == 0.3
    assert result.face_detected is False


@pytest.mark.parametrize("key,secret", [
    ('', 'secret'),
    ('your_faceplus_api_key_here', 'secret'),
    ('key', 'demo'),
])
def test_faceplusplus_placeholder_credentials_are_unconfigured(key, secret, sample_image):
    provider = FacePlusPlusProvider(key, secret)
    assert not provider.is_configured()
    with pytest.raises(ProviderNotConfigured):
        provider.classify(sample_image)


def test_faceplusplus_error_message_is_readable(fake_session, sample_image):
    fake_session.add('POST', 'faceplusplus',
                     FakeResponse(403, {'error_message': 'INSUFFICIENT_BALANCE'}))

    with pytest.raises(ProviderError) as excinfo:
        FacePlusPlusProvider('k', 's', session=fake_session).classify(sample_image)
    assert 'Saldo insuficiente' in excinfo.value.message


def test_faceplusplus_timeout_becomes_provider_error(fake_session, sample_image):
    fake_session.add('POST', 'faceplusplus', requests.Timeout('read timed out'))

    with pytest.raises(ProviderError) as excinfo:
        FacePlusPlusProvider('k', 's', session=fake_session).classify(sample_image)
    assert 'timeout' in excinfo.value.message


def test_faceplusplus_malformed_payload_becomes_provider_error(fake_session, sample_image):
    fake_session.add('POST', 'faceplusplus', FakeResponse(200, {'faces': [{'attributes': {}}]}))

    with pytest.raises(ProviderError):
        FacePlusPlusProvider('k', 's', session=fake_session).classify(sample_image)


@pytest.mark.parametrize("payload", [[], ['unexpected'], 'faces', 42])
@pytest.mark.parametrize("make_provider, url_part, method", [
    (lambda session: LocalServiceProvider('http://svc', session=session), '/detect-emotion', 'POST'),
    (lambda session: FacePlusPlusProvider('k', 's', session=session), 'faceplusplus', 'POST'),
    (lambda session: GoogleVisionProvider('g-key', session=session), 'vision.googleapis.com', 'POST'),
])
def test_non_object_json_becomes_provider_error(make_provider, url_part, method, payload,
                                                fake_session, sample_image):
    fake_session.add('GET', '/health', FakeResponse(200, {'status': 'ok'}))
    fake_session.add(method, url_part, FakeResponse(200, payload))

    with pytest.raises(ProviderError):
        make_provider(fake_session).classify(sample_image)


@pytest.mark.parametrize("payload", [{'error': {'code': 'Unspecified'}}, ['unexpected'], 'faces', 42])
def test_azure_non_list_payload_becomes_provider_error(payload, fake_session, sample_image):
    fake_session.add('POST', 'face/v1.0/detect', FakeResponse(200, payload))

    with pytest.raises(ProviderError):
        AzureFaceProvider('k', 'https://azure', session=fake_session).classify(sample_image)


def test_validate_image_rejects_invalid_base64():
    with pytest.raises(ValueError):
        validate_image('data:image/jpeg;base64,@@@not-base64@@@')


def test_describe_error_without_json():
    assert describe_error(500, 'Internal error', None) == 'Face++ API error: 500 - Internal error'


# --- Azure --------------------------------------------------------------------

def test_azure_folds_contempt_into_disgust(fake_session, sample_image):
    fake_session.add('POST', 'face/v1.0/detect', FakeResponse(200, [{
        'faceAttributes': {'emotion': {
            'anger': 0.05, 'contempt': 0.35, 'disgust': 0.3, 'fear': 0.0,
            'happiness': 0.1, 'neutral': 0.2, 'sadness': 0.0, 'surprise': 0.0,
        }},
    }]))
    provider = AzureFaceProvider('azure-key', 'https://example.cognitiveservices.azure.com/',
                                 session=fake_session)

    result = provider.classify(sample_image)

    assert result.emotion == 'disgust'
    assert result.distribution['disgust'] == pytest.approx(0.65)
    assert result.provenance == 'azure'
    assert_valid_distribution(result)

    call = fake_session.calls[0]
    assert call['params'] == {'returnFaceAttributes': 'emotion'}
    assert call['headers']['Content-Type'] == 'application/octet-stream'
    assert isinstance(call['data'], bytes)


def test_azure_no_faces(fake_session, sample_image):
    fake_session.add('POST', 'face/v1.0/detect', FakeResponse(200, []))
    result = AzureFaceProvider('k', 'https://azure', session=fake_session).classify(sample_image)

    assert result.face_detected is False
    assert result.confidence == 0.4


# --- Google Vision ------------------------------------------------------------

def test_google_likelihoods_map_to_scores():
    scores = likelihood_scores({
        'joyLikelihood': 'VERY_LIKELY',
        'sorrowLikelihood': 'UNLIKELY',
        'angerLikelihood': 'POSSIBLE',
        'surpriseLikelihood': 'UNKNOWN',
    })
    assert scores['happy'] == 0.9
    assert scores['sad'] == 0.2
    assert scores['angry'] == 0.4
    assert scores['surprised'] == 0.1
    assert scores['neutral'] == 0.5


def test_google_vision_classify(fake_session, sample_image):
    fake_session.add('POST', 'vision.googleapis.com', FakeResponse(200, {'responses': [{
        'faceAnnotations': [{'joyLikelihood': 'VERY_LIKELY', 'sorrowLikelihood': 'VERY_UNLIKELY',
                             'angerLikelihood': 'VERY_UNLIKELY', 'surpriseLikelihood': 'LIKELY'}],
    }]}))
    result = GoogleVisionProvider('g-key', session=fake_session).classify(sample_image)

    assert result.emotion == 'happy'
    assert result.confidence == pytest.approx(0.9)
    assert_valid_distribution(result)
    assert fake_session.calls[0]['params'] == {'key': 'g-key'}
    request_body = fake_session.calls[0]['json']['requests'][0]
    assert request_body['features'] == [{'type': 'FACE_DETECTION', 'maxResults': 1}]


def test_google_vision_no_faces(fake_session, sample_image):
    fake_session.add('POST', 'vision.googleapis.com', FakeResponse(200, {'responses': [{}]}))
    result = GoogleVisionProvider('g-key', session=fake_session).classify(sample_image)

    assert result.face_detected is False
    assert result.emotion == 'neutral'


# --- Construcción ------------------------------------------------------------

def test_build_providers_order(fake_session):
    providers = build_providers({'EMOTION_API_URL': 'http://svc'}, session=fake_session)

    assert [p.name for p in providers] == ['local_service', 'faceplusplus', 'azure', 'google_vision']
    assert [p.is_configured() for p in providers] == [True, False, False, False]
