import random
from datetime import datetime

import pytest
import requests

from moodmatch.core.emotion import EmotionProviderChain, EmotionSimulator, RealDetectionUnavailable
from moodmatch.core.emotion.providers import build_providers
from moodmatch.core.emotion.providers.base import EmotionProvider, ProviderError
from moodmatch.core.emotion.schema import STANDARD_EMOTIONS, EmotionResult
from moodmatch.core.emotion.simulator import image_variance, time_adjusted_weights

from conftest import FakeResponse


class ScriptedProvider(EmotionProvider):
    """Proveedor de pruebas con resultado o excepción fijos."""

    def __init__(self, name, outcome=None, configured=True):
        super().__init__(session=None)
        self.name = name
        self.outcome = outcome
        self.configured = configured
        self.calls = 0

    def is_configured(self):
        return self.configured

    def _classify(self, image):
        self.calls += 1
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def fixed_simulator(seed=7, hour=12):
    return EmotionSimulator(rng=random.Random(seed), clock=lambda: datetime(2024, 5, 15, hour, 0))


# --- Simulador ----------------------------------------------------------------

@pytest.mark.parametrize("seed", range(25))
def test_simulated_distribution_is_valid(seed, sample_image):
    result = fixed_simulator(seed).simulate(sample_image)

    assert result.provenance == 'simulated'
    assert result.emotion in STANDARD_EMOTIONS
    assert set(result.distribution) == set(STANDARD_EMOTIONS)
    assert sum(result.distribution.values()) == pytest.approx(1.0, abs=1e-6)
    assert max(result.distribution, key=result.distribution.get) == result.emotion
    assert 0.6 - 1e-9 <= result.confidence <= 0.95 + 1e-9
    assert all(value > 0 for value in result.distribution.values())


@pytest.mark.parametrize("emotion", STANDARD_EMOTIONS)
def test_build_distribution_keeps_primary_as_argmax(emotion):
    simulator = fixed_simulator()
    dist = simulator.build_distribution(emotion, 0.6)

    assert dist[emotion] == pytest.approx(0.6)
    assert max(dist, key=dist.get) == emotion
    assert sum(dist.values()) == pytest.approx(1.0, abs=1e-6)


def test_simulator_details():
    result = fixed_simulator(hour=20).simulate(None)

    assert result.details['time_context'] == '20:00 weekday'
    assert result.details['image_analyzed'] is False
    assert result.details['confidence_level'] in ('high', 'medium', 'low')


def test_time_adjusted_weights_favor_neutral_at_night():
    night = time_adjusted_weights(datetime(2024, 5, 15, 23, 0))
    noon = time_adjusted_weights(datetime(2024, 5, 15, 12, 0))
    assert night['neutral'] > noon['neutral']
    assert night['happy'] < noon['happy']


def test_image_variance_is_deterministic_and_bounded():
    assert image_variance(None) == 0.5
    value = image_variance('data:image/jpeg;base64,AAAA')
    assert value == image_variance('data:image/jpeg;base64,AAAA')
    assert 0.3 <= value <= 0.7


# --- Cadena -------------------------------------------------------------------

def happy_result(provenance):
    return EmotionResult.from_scores({'happy': 0.9, 'neutral': 0.1}, provenance=provenance)


def test_first_success_wins_and_later_providers_are_not_called(sample_image):
    first = ScriptedProvider('local_service', ProviderError('local_service', 'caído'))
    second = ScriptedProvider('faceplusplus', happy_result('faceplusplus'))
    third = ScriptedProvider('azure', happy_result('azure'))

    result = EmotionProviderChain([first, second, third], fixed_simulator()).detect(sample_image)

    assert result.provenance == 'faceplusplus'
    assert (first.calls, second.calls, third.calls) == (1, 1, 0)


def test_unconfigured_providers_are_skipped(sample_image):
    skipped = ScriptedProvider('faceplusplus', happy_result('faceplusplus'), configured=False)
    azure = ScriptedProvider('azure', happy_result('azure'))

    result = EmotionProviderChain([skipped, azure], fixed_simulator()).detect(sample_image)

    assert result.provenance == 'azure'
    assert skipped.calls == 0


@pytest.mark.parametrize("error", [
    requests.ConnectionError('refused'),
    requests.Timeout('slow'),
    KeyError('faces'),
    ValueError('bad json'),
])
def test_transient_errors_fall_through(error, sample_image):
    failing = ScriptedProvider('local_service', error)
    google = ScriptedProvider('google_vision', happy_result('google_vision'))

    result = EmotionProviderChain([failing, google], fixed_simulator()).detect(sample_image)
    assert result.provenance == 'google_vision'


def test_all_unreachable_without_require_real_is_simulated(fake_session, sample_image):
    providers = build_providers({
        'EMOTION_API_URL': 'http://localhost:5001',
        'FACEPLUS_API_KEY': 'key', 'FACEPLUS_API_SECRET': 'secret',
        'AZURE_FACE_API_KEY': 'key', 'AZURE_FACE_ENDPOINT': 'https://azure',
        'GOOGLE_VISION_API_KEY': 'key',
    }, session=fake_session)

    result = EmotionProviderChain(providers, fixed_simulator()).detect(sample_image)

    assert result.provenance == 'simulated'
    assert sum(result.distribution.values()) == pytest.approx(1.0, abs=1e-6)
    # Cada proveedor configurado se intentó una vez
    assert len(fake_session.calls_to('faceplusplus')) == 1
    assert len(fake_session.calls_to('face/v1.0/detect')) == 1
    assert len(fake_session.calls_to('vision.googleapis.com')) == 1


def test_all_unreachable_with_require_real_raises(fake_session, sample_image):
    providers = build_providers({
        'EMOTION_API_URL': 'http://localhost:5001',
        'FACEPLUS_API_KEY': 'key', 'FACEPLUS_API_SECRET': 'secret',
    }, session=fake_session)
    chain = EmotionProviderChain(providers, fixed_simulator())

    with pytest.raises(RealDetectionUnavailable) as excinfo:
        chain.detect(sample_image, require_real=True)

    attempts = excinfo.value.attempts
    assert attempts['azure'] == 'not_configured'
    assert attempts['faceplusplus'] != 'not_configured'
    assert 'han fallado' in str(excinfo.value)


def test_require_real_with_nothing_configured_mentions_configuration(sample_image):
    chain = EmotionProviderChain(build_providers({}), fixed_simulator())

    with pytest.raises(RealDetectionUnavailable) as excinfo:
        chain.detect(sample_image, require_real=True)
    assert 'FACEPLUS_API_KEY' in str(excinfo.value)
    assert not chain.has_real_provider()


@pytest.mark.parametrize("image", ['', '   ', None])
def test_empty_image_is_rejected_before_any_provider(image):
    provider = ScriptedProvider('local_service', happy_result('local_service'))
    with pytest.raises(ValueError):
        EmotionProviderChain([provider], fixed_simulator()).detect(image)
    assert provider.calls == 0


def test_real_provider_status():
    chain = EmotionProviderChain([
        ScriptedProvider('local_service', configured=False),
        ScriptedProvider('faceplusplus'),
    ])
    assert chain.real_provider_status() == {'local_service': False, 'faceplusplus': True}
    assert chain.has_real_provider()


def test_non_object_payloads_fall_through_to_simulator(fake_session, sample_image):
    fake_session.add('GET', 'localhost:5001/health', FakeResponse(200, {'status': 'ok'}))
    fake_session.add('POST', 'localhost:5001/detect-emotion', FakeResponse(200, ['unexpected']))
    fake_session.add('POST', 'faceplusplus', FakeResponse(200, []))
    providers = build_providers({
        'EMOTION_API_URL': 'http://localhost:5001',
        'FACEPLUS_API_KEY': 'key', 'FACEPLUS_API_SECRET': 'secret',
    }, session=fake_session)

    result = EmotionProviderChain(providers, fixed_simulator()).detect(sample_image)

    assert result.provenance == 'simulated'
    assert len(fake_session.calls_to('faceplusplus')) == 1


# --- Inmutabilidad --------------------------------------------------------------

def test_simulated_result_cannot_be_modified(sample_image):
    result = fixed_simulator().simulate(sample_image)

    with pytest.raises(TypeError):
        result.distribution['happy'] = 5.0
    with pytest.raises(TypeError):
        result.details['image_analyzed'] = False
    assert sum(result.distribution.values()) == pytest.approx(1.0, abs=1e-6)
    assert max(result.distribution, key=result.distribution.get) == result.emotion


def test_result_does_not_share_caller_dicts():
    scores = {'happy': 0.9, 'neutral': 0.1}
    details = {'face_quality': 0.8}
    result = EmotionResult.from_scores(scores, provenance='azure', details=details)
    details['face_quality'] = 0.1

    copy = result.with_provenance('local_service')
    payload = copy.to_dict()
    payload['all_emotions']['happy'] = 0.0

    assert result.details['face_quality'] == 0.8
    assert copy.distribution['happy'] == pytest.approx(0.9)
    with pytest.raises(TypeError):
        copy.distribution['sad'] = 1.0
