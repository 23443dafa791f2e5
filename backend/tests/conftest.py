"""
Fixtures comunes: sesiones HTTP falsas con respuestas programadas.

Ningún test accede a la red: toda URL sin ruta programada responde con
requests.ConnectionError, igual que un proveedor caído.
"""

import base64
import random

import pytest
import requests

from moodmatch.app import create_app
from moodmatch.core.utils.metrics import reset_metrics


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=''):
        self.status_code = status_code
        self._json = json_data
        self.text = text or ('' if json_data is None else str(json_data))

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeSession:
    """
    Sesión con respuestas programadas por método y fragmento de URL.

    Cada ruta consume sus respuestas en orden y repite la última. Una
    respuesta puede ser una excepción (se lanza) o un callable que recibe
    los kwargs de la llamada.
    """

    def __init__(self):
        self.routes = []
        self.calls = []

    def add(self, method, url_part, *responses):
        self.routes.append({'method': method, 'url_part': url_part, 'responses': list(responses)})
        return self

    def calls_to(self, url_part, method=None):
        return [
            call for call in self.calls
            if url_part in call['url'] and (method is None or call['method'] == method)
        ]

    def _dispatch(self, method, url, kwargs):
        self.calls.append({'method': method, 'url': url, **kwargs})
        for route in self.routes:
            if route['method'] == method and route['url_part'] in url:
                responses = route['responses']
                response = responses.pop(0) if len(responses) > 1 else responses[0]
                if isinstance(response, Exception):
                    raise response
                if callable(response):
                    return response(kwargs)
                return response
        raise requests.ConnectionError(f"Sin ruta para {method} {url}")

    def get(self, url, **kwargs):
        return self._dispatch('GET', url, kwargs)

    def post(self, url, **kwargs):
        return self._dispatch('POST', url, kwargs)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def sample_image():
    payload = base64.b64encode(b'\xff\xd8\xff\xe0fake-jpeg-bytes').decode('ascii')
    return f"data:image/jpeg;base64,{payload}"


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture(autouse=True)
def clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


# Configuración sin ninguna credencial real
EMPTY_CREDENTIALS = {
    'TESTING': True,
    'EMOTION_API_URL': '',
    'FACEPLUS_API_KEY': '',
    'FACEPLUS_API_SECRET': '',
    'AZURE_FACE_API_KEY': '',
    'AZURE_FACE_ENDPOINT': '',
    'GOOGLE_VISION_API_KEY': '',
    'OMDB_API_KEY': '',
    'SPOTIFY_CLIENT_ID': '',
    'SPOTIFY_CLIENT_SECRET': '',
    'GOOGLE_BOOKS_API_KEY': '',
    'INCLUDE_METRICS': False,
}


@pytest.fixture
def make_app(fake_session):
    """Crea una app de pruebas con la sesión falsa y overrides opcionales."""

    def _make(**overrides):
        config = dict(EMPTY_CREDENTIALS)
        config['HTTP_SESSION'] = fake_session
        config.update(overrides)
        return create_app(config)

    return _make


@pytest.fixture
def client(make_app):
    return make_app().test_client()
