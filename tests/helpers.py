import io
from types import SimpleNamespace

from PIL import Image

from studio.generation import GenerationClient
from studio.models import EncodedImage


def make_image_bytes(width, height, fmt='PNG', mode='RGB', color=(200, 120, 80)):
    if mode == 'RGBA' and len(color) == 3:
        color = color + (128,)
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_encoded(width=64, height=64):
    return EncodedImage(
        data=make_image_bytes(width, height, fmt='JPEG'),
        mime_type='image/jpeg',
        width=width,
        height=height,
    )


def image_part(data=b'generated-png-bytes', mime_type='image/png'):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))


def text_part(text):
    return SimpleNamespace(text=text, inline_data=None)


def make_response(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


class FakeModels:
    """Stands in for `genai.Client().models`; replays outcomes in order."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append({'model': model, 'contents': contents, 'config': config})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeGenai:
    def __init__(self, *outcomes):
        self.models = FakeModels(outcomes)
        self.api_keys = []

    def factory(self, api_key):
        self.api_keys.append(api_key)
        return self

    @property
    def calls(self):
        return self.models.calls


def make_client(*outcomes, api_key='test-key', **kwargs):
    """GenerationClient wired to a FakeGenai; returns (client, fake, recorded sleeps)."""
    fake = FakeGenai(*outcomes)
    sleeps = []
    kwargs.setdefault('retry_delay_s', 2.0)
    client = GenerationClient(
        api_key=api_key,
        client_factory=fake.factory,
        sleep=sleeps.append,
        **kwargs
    )
    return client, fake, sleeps
